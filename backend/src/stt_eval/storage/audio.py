"""Filesystem-backed audio clip store with signed playback links.

Clips are stored under ``<root>/<session_id>/<uuid>.<ext>``. The stored path
is what attempts record; playback goes through a time-limited token that
signs that path.
"""

from functools import lru_cache
from pathlib import Path
from uuid import uuid4

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from stt_eval.core.logging import get_logger

logger = get_logger(__name__)

SIGNING_SALT = "stt-audio-clips"


class AudioStorageError(Exception):
    """Storing or resolving an audio clip failed."""


class AudioStore:
    """Stores audio blobs and issues signed links for them."""

    def __init__(self, root: Path, secret: str, url_prefix: str = "/api/v1/audio"):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")
        self._serializer = URLSafeTimedSerializer(secret, salt=SIGNING_SALT)

    def upload(
        self,
        session_id: str,
        data: bytes,
        content_type: str | None = None,
        filename: str | None = None,
    ) -> str:
        """Store a clip and return its storage path.

        The extension comes from ``filename``, falling back to ``webm``.

        Raises:
            AudioStorageError: If the clip cannot be written.
        """
        extension = self._extension(filename)
        path = f"{session_id}/{uuid4()}.{extension}"
        target = self._resolve(path)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Never overwrite an existing clip
            with target.open("xb") as fh:
                fh.write(data)
        except OSError as e:
            raise AudioStorageError(f"Failed to store audio clip {path}: {e}") from e

        logger.info(
            "audio_clip_stored",
            path=path,
            content_type=content_type,
            size_bytes=len(data),
        )
        return path

    def create_signed_url(self, path: str) -> str:
        """Return a playback URL carrying a signed token for ``path``.

        Raises:
            AudioStorageError: If no clip is stored at ``path``.
        """
        if not self._resolve(path).is_file():
            raise AudioStorageError(f"Audio clip not found: {path}")
        token = self._serializer.dumps(path)
        return f"{self.url_prefix}/{token}"

    def resolve_signed_token(self, token: str, max_age: int) -> Path:
        """Verify a playback token and return the clip's file path.

        Raises:
            AudioStorageError: If the token is invalid, expired, or the clip
                is missing.
        """
        try:
            path = self._serializer.loads(token, max_age=max_age)
        except SignatureExpired as e:
            raise AudioStorageError("Signed URL expired") from e
        except BadSignature as e:
            raise AudioStorageError("Invalid signed URL") from e

        target = self._resolve(path)
        if not target.is_file():
            raise AudioStorageError(f"Audio clip not found: {path}")
        return target

    def _resolve(self, path: str) -> Path:
        root = self.root.resolve()
        target = (root / path).resolve()
        if not target.is_relative_to(root):
            raise AudioStorageError(f"Invalid audio path: {path}")
        return target

    @staticmethod
    def _extension(filename: str | None) -> str:
        if filename and "." in filename:
            suffix = filename.rsplit(".", 1)[1].strip().lower()
            if suffix.isalnum():
                return suffix
        return "webm"


@lru_cache
def get_audio_store() -> AudioStore:
    """Get the configured audio store. Use this for dependency injection."""
    from stt_eval.core.config import settings

    return AudioStore(settings.audio_storage_dir, settings.audio_signing_secret)
