from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the establishment ingestion pipeline.
    """

    raw_export_path: Path = Path("envie_search/data/raw/establishments.csv")
    processed_data_dir: Path = Path("envie_search/data/processed")
    processed_filename: str = "venues.json"

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
