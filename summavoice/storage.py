# summavoice/storage.py
"""Generated audio on disk."""
import io
import logging
import os
import time
import uuid

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from summavoice import config

logger = logging.getLogger(__name__)

# codec -> (extension, mimetype)
CODEC_FILES = {
    "MP3": ("mp3", "audio/mpeg"),
    "WAV": ("wav", "audio/wav"),
    "AAC": ("aac", "audio/aac"),
    "OGG": ("ogg", "audio/ogg"),
    "CAF": ("caf", "audio/x-caf"),
}


def audio_duration(audio: bytes, ext: str):
    """Length in whole seconds, or None when ffmpeg cannot decode the buffer."""
    try:
        segment = AudioSegment.from_file(io.BytesIO(audio), format=ext)
    except (CouldntDecodeError, OSError) as exc:
        logger.warning("Could not determine audio duration: %s", exc)
        return None
    return round(len(segment) / 1000)


def save_audio(audio: bytes, codec="MP3", prefix="speech", original_name=None) -> dict:
    """Write an audio buffer to the audio directory and describe it as AudioFile columns."""
    ext, mimetype = CODEC_FILES.get(codec, CODEC_FILES["MP3"])
    filename = f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4()}.{ext}"
    os.makedirs(config.AUDIO_DIR, exist_ok=True)
    path = os.path.join(config.AUDIO_DIR, filename)
    with open(path, "wb") as f:
        f.write(audio)
    logger.info("Saved %d bytes of audio to %s", len(audio), path)

    return {
        "filename": filename,
        "original_name": original_name or filename,
        "mimetype": mimetype,
        "size": len(audio),
        "path": path,
        "url": f"/output/{filename}",
        "duration": audio_duration(audio, ext),
    }


def remove_file(path):
    if path and os.path.exists(path):
        try:
            os.remove(path)
        except OSError:
            logger.exception("Could not remove %s", path)
