import logging
import shutil
import zipfile
from config import PHOTO_EXTENSIONS, SIDECAR_SUFFIX, TEMP_EXTRACT_DIR
from pathlib import Path

logger = logging.getLogger(__name__)


class PhotoArchiveExtractor:
    """Unpack an uploaded zip of photos into a working directory"""

    def __init__(self, output_dir: Path = Path(TEMP_EXTRACT_DIR)):
        self.output_dir = output_dir

    def find_photo_zip(self, search_dir: Path = Path(".")) -> Path | None:
        """Find the most recent zip archive in a directory"""
        zip_files = list(search_dir.glob("*.zip"))

        if not zip_files:
            logger.error(f"No zip files found in {search_dir}")
            return None

        if len(zip_files) > 1:
            logger.warning(f"Multiple zip files found: {[f.name for f in zip_files]}")
            logger.info(f"Using most recent: {max(zip_files, key=lambda f: f.stat().st_mtime).name}")

        return max(zip_files, key=lambda f: f.stat().st_mtime)

    def _is_wanted(self, member: zipfile.ZipInfo) -> bool:
        name = member.filename
        if member.is_dir() or '__MACOSX' in name or Path(name).name.startswith('.'):
            return False
        suffix = Path(name).suffix.lower()
        return suffix in PHOTO_EXTENSIONS or suffix == SIDECAR_SUFFIX

    def extract_archive(self, zip_path: Path | None = None) -> Path | None:
        """
        Extract photos (and Takeout sidecars) from a zip archive

        Args:
            zip_path: Path to the zip archive (auto-detected if None)

        Returns:
            Path | None: Directory holding the extracted photos, or None on failure
        """
        if zip_path is None:
            zip_path = self.find_photo_zip()
            if zip_path is None:
                return None

        if not zip_path.exists():
            logger.error(f"Zip file not found: {zip_path}")
            return None

        logger.info(f"Extracting photos from: {zip_path}")

        self.cleanup()
        self.output_dir.mkdir(parents=True)

        try:
            with zipfile.ZipFile(zip_path, 'r') as zip_ref:
                members = [member for member in zip_ref.infolist() if self._is_wanted(member)]
                for member in members:
                    zip_ref.extract(member, self.output_dir)
        except zipfile.BadZipFile as e:
            logger.error(f"Invalid zip archive {zip_path}: {e}")
            self.cleanup()
            return None

        if not members:
            logger.error("No photos found in archive")
            self.cleanup()
            return None

        logger.info(f"Extracted {len(members)} files to {self.output_dir}")
        return self.output_dir

    def cleanup(self) -> None:
        if self.output_dir.exists():
            shutil.rmtree(self.output_dir)
