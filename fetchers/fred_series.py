"""
FRED Series Fetcher

Fetches the monthly US series used by the Phillips-curve inflation models
from FRED (Federal Reserve Economic Data) and returns them in long format.

Series:
- Personal Consumption Expenditures price index (PCEPI)
- Civilian unemployment rate (UNRATE)
- Cleveland Fed 1-year expected inflation (EXPINF1YR)
- University of Michigan inflation expectation (MICH)
- Industrial Production index (INDPRO)
"""

import logging
import os
from typing import Dict, Iterable, Optional

import pandas as pd
import requests

from helpers.temporal import FrequencyError, to_monthly_period_index
from inflation_forecaster_src.config_utils import get_config_value
from inflation_forecaster_src.data_utils import LONG_COLUMNS
from inflation_forecaster_src.exceptions import FetchError

logger = logging.getLogger(__name__)

PHILLIPS_SERIES: Dict[str, str] = {
    'PCEPI': 'Personal Consumption Expenditures: Chain-type Price Index',
    'UNRATE': 'Unemployment Rate',
    'EXPINF1YR': '1-Year Expected Inflation',
    'MICH': 'University of Michigan: Inflation Expectation',
    'INDPRO': 'Industrial Production: Total Index',
}

DEFAULT_START_DATE = '1982-01-01'


class FredSeriesFetcher:
    """Fetcher for monthly series from the FRED observations API."""

    BASE_URL = "https://api.stlouisfed.org/fred"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0,
                 check_frequency: bool = False):
        """
        Initialize FRED series fetcher.

        Parameters
        ----------
        api_key : str, optional
            FRED API key. If None, will attempt to get from environment or config.
        timeout : float, default 30.0
            Per-request timeout in seconds.
        check_frequency : bool, default False
            Also query series metadata and require a monthly native frequency.
        """
        self.api_key = self._resolve_api_key(api_key)
        self.timeout = timeout
        self.check_frequency = check_frequency

    def _resolve_api_key(self, explicit_key: Optional[str] = None) -> Optional[str]:
        """Resolve FRED API key from various sources."""
        if explicit_key:
            return explicit_key

        api_key = os.getenv('FRED_API_KEY')
        if api_key:
            logger.debug("Using FRED API key from environment variable")
            return api_key

        api_key = get_config_value('data_sources.fred.api_key')
        if api_key:
            logger.debug("Using FRED API key from configuration")
            return api_key

        logger.warning("No FRED API key found - fetching will fail")
        return None

    def _get(self, endpoint: str, params: dict) -> dict:
        if not self.api_key:
            raise FetchError("FRED API key is required for data fetching (set FRED_API_KEY)")

        query = dict(params, api_key=self.api_key, file_type='json')
        try:
            response = requests.get(f"{self.BASE_URL}/{endpoint}", params=query, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error("FRED request %s failed for %s: %s", endpoint, params.get('series_id'), e)
            raise FetchError(
                f"Failed to fetch FRED {endpoint} for {params.get('series_id')}: {e}",
                details={'series_id': params.get('series_id')},
            ) from e

    def fetch_series_info(self, series_id: str) -> dict:
        """Series metadata (title, frequency, units, ...) from the 'series' endpoint."""
        data = self._get('series', {'series_id': series_id})
        items = data.get('seriess') or []  # FRED returns key 'seriess'
        if not items:
            raise FetchError(f"No metadata found for series {series_id}")
        return items[0]

    def check_monthly(self, series_id: str) -> None:
        """Raise FetchError unless FRED reports a monthly native frequency."""
        info = self.fetch_series_info(series_id)
        freq = str(info.get('frequency_short', '')).upper()
        if freq != 'M':
            raise FetchError(
                f"Series {series_id} has frequency {info.get('frequency', freq)!r}; expected Monthly",
                details={'series_id': series_id, 'frequency': info.get('frequency')},
            )

    def fetch_series(self, series_id: str, start_date: Optional[str] = None,
                     end_date: Optional[str] = None) -> pd.Series:
        """
        Fetch a monthly FRED time series.

        Parameters
        ----------
        series_id : str
            FRED series ID (e.g., 'PCEPI')
        start_date : str, optional
            Start date in YYYY-MM-DD format
        end_date : str, optional
            End date in YYYY-MM-DD format

        Returns
        -------
        pd.Series
            Observations with a monthly PeriodIndex named 'month'

        Raises
        ------
        FetchError
            On network/HTTP failure, unknown series, empty result, or a
            series with more than one observation per month.
        """
        params = {
            'series_id': series_id,
            'sort_order': 'asc',
        }
        if start_date:
            params['observation_start'] = start_date
        if end_date:
            params['observation_end'] = end_date

        if self.check_frequency:
            self.check_monthly(series_id)

        logger.debug("Fetching FRED series: %s", series_id)
        data = self._get('series/observations', params)
        observations = data.get('observations', [])

        if not observations:
            raise FetchError(f"No observations found for series {series_id}")

        df = pd.DataFrame(observations)
        df['date'] = pd.to_datetime(df['date'])
        # Missing values are marked as '.'
        df['value'] = pd.to_numeric(df['value'], errors='coerce')
        df = df.dropna(subset=['value'])

        if df.empty:
            raise FetchError(f"No valid data points for series {series_id}")

        series = pd.Series(df['value'].values, index=df['date'], name=series_id)
        try:
            series = to_monthly_period_index(series)
        except FrequencyError as e:
            raise FetchError(str(e), details={'series_id': series_id}) from e

        logger.info("Fetched %d observations for FRED series %s", len(series), series_id)
        return series

    def fetch_observations(self, series_ids: Iterable[str], start_date: Optional[str] = None,
                           end_date: Optional[str] = None) -> pd.DataFrame:
        """
        Fetch several monthly series into one long-format table.

        Parameters
        ----------
        series_ids : Iterable[str]
            FRED series IDs
        start_date, end_date : str, optional
            Date range in YYYY-MM-DD format

        Returns
        -------
        pd.DataFrame
            Columns ['month', 'series_id', 'value'], one row per (month, series_id)
        """
        frames = []
        for series_id in series_ids:
            s = self.fetch_series(series_id, start_date, end_date)
            frames.append(pd.DataFrame({
                'month': s.index,
                'series_id': series_id,
                'value': s.values,
            }))

        if not frames:
            raise FetchError("No series requested")

        return pd.concat(frames, ignore_index=True)[LONG_COLUMNS]


def fetch_phillips_series(api_key: Optional[str] = None,
                          start_date: Optional[str] = DEFAULT_START_DATE,
                          end_date: Optional[str] = None) -> pd.DataFrame:
    """
    Convenience function to fetch the five Phillips-curve series.

    Parameters
    ----------
    api_key : str, optional
        FRED API key
    start_date : str, optional
        Start date in YYYY-MM-DD format
    end_date : str, optional
        End date in YYYY-MM-DD format

    Returns
    -------
    pd.DataFrame
        Long-format observations table
    """
    fetcher = FredSeriesFetcher(api_key)
    return fetcher.fetch_observations(PHILLIPS_SERIES, start_date=start_date, end_date=end_date)
