import subprocess
import json
from pathlib import Path
from typing import Optional

class FFprobeAdapter:
    """Wrapper around ffprobe, used to learn a clip's duration for progress reporting."""

    def get_duration(self, file_path: Path) -> Optional[float]:
        """Returns the container duration in seconds, or None if ffprobe can't tell."""
        cmd = [
            "ffprobe",
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            str(file_path)
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError:
            return None
        if result.returncode != 0:
            return None

        try:
            data = json.loads(result.stdout)
            duration = float(data.get("format", {}).get("duration", 0.0))
        except (ValueError, TypeError):
            return None
        return duration if duration > 0 else None
