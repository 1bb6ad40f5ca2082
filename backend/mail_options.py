# mail_options.py
"""
Translation of caller-supplied send options into the structure handed to an
EmailProvider.

Callers may pass either a plain mapping using the option names
``fileIdList``, ``noReply`` and ``name``, or a typed ``MailOptions``.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from file_stores.base import Blob, FileStore
from logging_config import get_logger

logger = get_logger("mail_dispatch", component="options")

FILE_ID_LIST = "fileIdList"
NO_REPLY = "noReply"
NAME = "name"


@dataclass(frozen=True)
class AttachmentRef:
    file_id: str
    mime_type: str


@dataclass(frozen=True)
class MailOptions:
    attachments: Tuple[AttachmentRef, ...] = ()
    no_reply: Optional[bool] = None
    sender_name: Optional[str] = None

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "MailOptions":
        """
        Build typed options from a loosely typed mapping.

        Unknown keys are ignored. A non-boolean noReply is dropped, and name is
        kept only if it is a non-empty string and the raw noReply is falsy.
        """
        options = options or {}

        raw_no_reply = options.get(NO_REPLY)
        no_reply = raw_no_reply if isinstance(raw_no_reply, bool) else None

        raw_name = options.get(NAME)
        sender_name = None
        if isinstance(raw_name, str) and raw_name and not raw_no_reply:
            sender_name = raw_name

        return cls(
            attachments=_normalize_file_id_list(options.get(FILE_ID_LIST)),
            no_reply=no_reply,
            sender_name=sender_name,
        )


@dataclass(frozen=True)
class ResolvedOptions:
    attachments: Optional[Tuple[Blob, ...]] = None
    no_reply: Optional[bool] = None
    name: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.attachments:
            out["attachments"] = list(self.attachments)
        if self.no_reply is not None:
            out[NO_REPLY] = self.no_reply
        if self.name:
            out[NAME] = self.name
        return out


@dataclass(frozen=True)
class AttachmentResolution:
    ref: AttachmentRef
    blob: Optional[Blob] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.blob is not None


OptionsInput = Union[MailOptions, Mapping[str, Any], None]


def _is_pair(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and all(isinstance(v, str) for v in value)
    )


def _normalize_file_id_list(value: Any) -> Tuple[AttachmentRef, ...]:
    if value is None:
        return ()

    if isinstance(value, AttachmentRef):
        return (value,)

    if not isinstance(value, (list, tuple)):
        logger.warning("file_id_list_ignored", extra={"value": value})
        return ()

    # a single (file_id, mime_type) pair
    items: Sequence[Any] = [value] if _is_pair(value) else value

    refs: List[AttachmentRef] = []
    for item in items:
        if isinstance(item, AttachmentRef):
            refs.append(item)
        elif _is_pair(item):
            refs.append(AttachmentRef(file_id=item[0], mime_type=item[1]))
        else:
            logger.warning("attachment_ref_ignored", extra={"value": item})
    return tuple(refs)


def resolve_attachment(ref: AttachmentRef, file_store: FileStore) -> AttachmentResolution:
    try:
        lookup = file_store.get_file(ref.file_id)
        if not lookup.ok:
            return AttachmentResolution(ref=ref, reason=lookup.error or "file could not be resolved")
        blob = lookup.handle.as_blob(ref.mime_type)
    except Exception as e:
        return AttachmentResolution(ref=ref, reason=str(e) or type(e).__name__)

    return AttachmentResolution(ref=ref, blob=blob)


def translate(options: OptionsInput, file_store: FileStore) -> ResolvedOptions:
    """
    Resolve attachments and sender overrides into ResolvedOptions.

    Never raises. Attachments that cannot be resolved are logged and skipped;
    if none resolve, ``attachments`` is left unset rather than empty.
    """
    if not isinstance(options, MailOptions):
        options = MailOptions.from_mapping(options)

    resolutions = [resolve_attachment(ref, file_store) for ref in options.attachments]
    for r in resolutions:
        if not r.ok:
            logger.warning(
                "attachment_unresolved",
                extra={"file_id": r.ref.file_id, "mime_type": r.ref.mime_type, "reason": r.reason},
            )
    blobs = tuple(r.blob for r in resolutions if r.ok)

    name = None
    if not options.no_reply and options.sender_name:
        name = options.sender_name

    return ResolvedOptions(
        attachments=blobs or None,
        no_reply=options.no_reply,
        name=name,
    )
