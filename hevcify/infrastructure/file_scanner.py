from pathlib import Path
from typing import Iterable, List, Tuple

class FileScanner:
    """Lists the immediate children of a directory and sorts them by extension."""

    def __init__(self, extensions: Iterable[str], intermediate_suffix: str = ""):
        self.extensions = {ext.lower().lstrip(".") for ext in extensions}
        self.intermediate_suffix = intermediate_suffix

    def is_supported(self, path: Path) -> bool:
        return path.suffix.lower().lstrip(".") in self.extensions

    def is_intermediate(self, path: Path) -> bool:
        return bool(self.intermediate_suffix) and path.stem.endswith(self.intermediate_suffix)

    def scan(self, directory: Path) -> Tuple[List[Path], List[Tuple[Path, str]]]:
        """Returns (eligible files, [(ignored file, reason)]). Not recursive."""
        eligible: List[Path] = []
        ignored: List[Tuple[Path, str]] = []

        for entry in sorted(directory.iterdir()):
            if not entry.is_file():
                continue
            if not self.is_supported(entry):
                ignored.append((entry, f"unsupported extension '{entry.suffix or '(none)'}'"))
            elif entry.name.startswith("._"):
                ignored.append((entry, "AppleDouble resource file"))
            elif self.is_intermediate(entry):
                ignored.append((entry, "intermediate output of a previous run"))
            else:
                eligible.append(entry)

        return eligible, ignored
