import logging
from pathlib import Path

import requests

from osu_difficulty.errors import BeatmapLoadError
from osu_difficulty.parsers.beatmap_parser import load_beatmap
from osu_difficulty.schemas.beatmap import Beatmap

BASE_URL = "https://osu.ppy.sh"
DEFAULT_CACHE_DIR = Path("cache")
REQUEST_TIMEOUT = 30.0  # seconds

logger = logging.getLogger(__name__)


class OsuWebClient:
    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url
        self.session = requests.Session()
        self.session.headers["User-Agent"] = "osu-difficulty/0.1.0"

    def download_beatmap(self, beatmap_id: int, cache_dir: Path = DEFAULT_CACHE_DIR) -> Path:
        """Download ``<id>.osu`` into *cache_dir*, reusing a cached copy.

        The website answers unknown IDs with an empty body, which is
        reported as a BeatmapLoadError rather than cached.
        """
        target = Path(cache_dir) / f"{beatmap_id}.osu"
        if target.exists():
            logger.debug("Using cached %s", target)
            return target

        logger.info("Downloading %d.osu...", beatmap_id)
        try:
            response = self.session.get(
                f"{self.base_url}/osu/{beatmap_id}", timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise BeatmapLoadError(f"Failed to download beatmap {beatmap_id}: {e}") from e

        if not response.content.strip():
            raise BeatmapLoadError(f"Beatmap {beatmap_id} was not found online.")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(response.content)
        return target


def load_beatmap_from_file_or_id(
    file_or_id: str,
    cache_dir: Path = DEFAULT_CACHE_DIR,
    client: OsuWebClient | None = None,
) -> Beatmap:
    """Load a beatmap from a ``.osu`` path or an online beatmap ID."""
    if file_or_id.endswith(".osu"):
        if not Path(file_or_id).is_file():
            raise BeatmapLoadError(f"Beatmap file {file_or_id} does not exist.")
        return load_beatmap(Path(file_or_id))

    try:
        beatmap_id = int(file_or_id)
    except ValueError:
        raise BeatmapLoadError("Could not parse provided beatmap ID.") from None

    client = client or OsuWebClient()
    beatmap = load_beatmap(client.download_beatmap(beatmap_id, cache_dir))
    if beatmap.metadata.beatmap_id <= 0:
        beatmap.metadata.beatmap_id = beatmap_id
    return beatmap
