"""Loading the metro dataset from the environment, a file, or an HTTP endpoint."""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Optional

import requests

from .config import DEFAULT_DATA_FILE, METRO_DATA_ENV, Settings
from .errors import DatasetUnavailable
from .stations import MetroDataset, parse_dataset

logger = logging.getLogger(__name__)


def load_dataset_from_env(var: str = METRO_DATA_ENV) -> dict[str, Any]:
    """Read the raw JSON dataset from an environment variable."""
    raw = os.getenv(var)
    if not raw:
        raise DatasetUnavailable(f"Metro data not found in environment ({var})")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise DatasetUnavailable(f"Metro data in {var} is not valid JSON: {e}") from e


def load_dataset_file(path: Path) -> dict[str, Any]:
    """Read the raw JSON dataset from a file."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DatasetUnavailable(f"Metro data file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise DatasetUnavailable(f"Could not read metro data from {path}: {e}") from e


class MetroDataClient:
    """Client for an HTTP endpoint serving the metro dataset."""

    def __init__(self, url: str, timeout: float = 10.0, cache_ttl: float = 300.0):
        self.url = url
        self.timeout = timeout
        self._cache: Optional[tuple[float, dict[str, Any]]] = None
        self._cache_ttl = cache_ttl  # seconds

    def fetch(self, force: bool = False) -> dict[str, Any]:
        """Fetch the raw dataset, reusing a recent response unless ``force``.

        Raises:
            DatasetUnavailable: on timeouts, connection failures, HTTP errors
                or a body that is not JSON.
        """
        if self._cache and not force:
            cached_time, cached_data = self._cache
            if time.time() - cached_time < self._cache_ttl:
                return cached_data

        logger.info("Fetching metro data from %s", self.url)
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise DatasetUnavailable(
                f"Request for metro data timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise DatasetUnavailable(f"Connection to {self.url} failed: {e}") from e
        except requests.exceptions.HTTPError as e:
            raise DatasetUnavailable(
                f"Metro data endpoint returned {e.response.status_code}"
            ) from e
        except ValueError as e:
            raise DatasetUnavailable(f"Metro data endpoint returned invalid JSON: {e}") from e
        except requests.exceptions.RequestException as e:
            raise DatasetUnavailable(f"Error fetching metro data: {e}") from e

        self._cache = (time.time(), data)
        return data


def load_dataset(settings: Optional[Settings] = None) -> MetroDataset:
    """Load and validate the dataset from the first configured source.

    Sources are tried in order: environment variable, data file, URL,
    then the bundled default file.

    Raises:
        DatasetUnavailable: if no source is configured or the source fails.
        MalformedDataset: if the data does not describe a valid network.
    """
    settings = settings or Settings.from_env()

    if os.getenv(settings.data_env):
        raw = load_dataset_from_env(settings.data_env)
    elif settings.data_file:
        raw = load_dataset_file(settings.data_file)
    elif settings.data_url:
        raw = MetroDataClient(settings.data_url, timeout=settings.data_timeout).fetch()
    elif DEFAULT_DATA_FILE.exists():
        raw = load_dataset_file(DEFAULT_DATA_FILE)
    else:
        raise DatasetUnavailable(
            f"No metro data source configured; set {settings.data_env}, "
            "METRO_DATA_FILE or METRO_DATA_URL"
        )

    dataset = parse_dataset(raw)
    logger.info("Loaded metro data: %d lines", len(dataset.lines))
    return dataset
