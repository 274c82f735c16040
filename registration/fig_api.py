import json
import logging
import time
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, List, Optional, Tuple

import redis
import requests

from shared.errors import ExternalServiceError
from .categories import calculate_age, calculate_category

logger = logging.getLogger(__name__)

CACHE_KEY = 'fig-gymnasts'


@dataclass
class GymnastView:
    """A gymnast as seen by the registration pipelines, from either source."""
    fig_id: str
    first_name: str
    last_name: str
    gender: Optional[str]
    country: str
    birth_date: Optional[str] = None
    discipline: str = 'AER'
    is_licensed: bool = True
    is_local: bool = False
    id: Optional[str] = None  # local row id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def date_of_birth(self) -> Optional[date]:
        if not self.birth_date:
            return None
        try:
            return date.fromisoformat(self.birth_date[:10])
        except ValueError:
            return None

    @property
    def age(self) -> Optional[int]:
        dob = self.date_of_birth
        return calculate_age(dob) if dob else None

    def to_dict(self) -> dict:
        age = self.age
        return {
            'id': self.id,
            'figId': self.fig_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'gender': self.gender,
            'country': self.country,
            'birthDate': self.birth_date,
            'discipline': self.discipline,
            'isLicensed': self.is_licensed,
            'isLocal': self.is_local,
            'age': age,
            'category': calculate_category(age).value if age is not None else None,
        }

    @classmethod
    def from_registry(cls, athlete: dict) -> "GymnastView":
        return cls(
            fig_id=str(athlete.get('gymnastid', '')),
            first_name=athlete.get('preferredfirstname') or '',
            last_name=athlete.get('preferredlastname') or '',
            gender='M' if athlete.get('gender') == 'male' else 'F',
            country=athlete.get('country') or '',
            birth_date=athlete.get('birth'),
            discipline=athlete.get('discipline') or 'AER',
            is_licensed=True,  # the registry only lists licensed athletes
        )

    @classmethod
    def from_model(cls, gymnast) -> "GymnastView":
        return cls(
            id=gymnast.id,
            fig_id=gymnast.fig_id,
            first_name=gymnast.first_name,
            last_name=gymnast.last_name,
            gender=gymnast.gender,
            country=gymnast.country,
            birth_date=gymnast.date_of_birth.isoformat() if gymnast.date_of_birth else None,
            discipline=gymnast.discipline or 'AER',
            is_licensed=bool(gymnast.license_valid),
            is_local=bool(gymnast.is_local),
        )


class FigApiClient:
    """
    Read-through cached client for the FIG athlete licence registry.

    Results are cached in Redis when a client is given, otherwise in a
    process-local dict. A TTL of 0 disables caching.
    """

    def __init__(
        self,
        base_url: str = 'https://www.gymnastics.sport/api',
        endpoint: str = '/athletes.php',
        discipline: str = 'AER',
        timeout: int = 30,
        cache_ttl: int = 3600,
        redis_client: Optional[redis.Redis] = None,
        session: Optional[requests.Session] = None
    ):
        self.url = base_url.rstrip('/') + endpoint
        self.discipline = discipline
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.redis = redis_client
        self.session = session or requests.Session()
        self._local_cache: Dict[str, Tuple[float, str]] = {}

    @classmethod
    def from_config(cls, config) -> "FigApiClient":
        redis_url = config.get('REDIS_URL')
        client = None
        if redis_url:
            client = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=5)
        return cls(
            base_url=config.get('FIG_API_BASE_URL', 'https://www.gymnastics.sport/api'),
            endpoint=config.get('FIG_API_ATHLETES_ENDPOINT', '/athletes.php'),
            discipline=config.get('FIG_API_DISCIPLINE', 'AER'),
            timeout=config.get('FIG_API_TIMEOUT', 30),
            cache_ttl=config.get('FIG_CACHE_TTL', 3600),
            redis_client=client,
        )

    # ==================== Cache ====================

    def _cache_get(self, key: str) -> Optional[List[dict]]:
        if self.cache_ttl <= 0:
            return None
        if self.redis is not None:
            try:
                raw = self.redis.get(key)
            except redis.RedisError as e:
                logger.warning(f"FIG cache read failed for {key}: {e}")
                return None
        else:
            entry = self._local_cache.get(key)
            if entry is None or entry[0] < time.monotonic():
                self._local_cache.pop(key, None)
                return None
            raw = entry[1]
        return json.loads(raw) if raw else None

    def _cache_set(self, key: str, athletes: List[dict]):
        if self.cache_ttl <= 0:
            return
        raw = json.dumps(athletes)
        if self.redis is not None:
            try:
                self.redis.setex(key, self.cache_ttl, raw)
            except redis.RedisError as e:
                logger.warning(f"FIG cache write failed for {key}: {e}")
        else:
            self._local_cache[key] = (time.monotonic() + self.cache_ttl, raw)

    def clear_cache(self):
        self._local_cache.clear()
        if self.redis is not None:
            try:
                keys = list(self.redis.scan_iter(match=f"{CACHE_KEY}*"))
                if keys:
                    self.redis.delete(*keys)
            except redis.RedisError as e:
                logger.warning(f"Failed to clear FIG cache: {e}")
        logger.info("FIG gymnast cache cleared")

    # ==================== Registry ====================

    def _fetch(self, country: str = '') -> List[dict]:
        params = {
            'function': 'searchLicenses',
            'discipline': self.discipline,
            'country': country,
            'idlicense': '',
            'lastname': '',
        }
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            raise ExternalServiceError("FIG API timeout", status_code=504)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 429:
                raise ExternalServiceError("FIG API rate limit exceeded", status_code=429)
            raise ExternalServiceError("Failed to fetch gymnast data")
        except (requests.RequestException, ValueError):
            raise ExternalServiceError("Failed to fetch gymnast data")

        if not isinstance(data, list):
            raise ExternalServiceError("FIG API returned unexpected data format")
        return data

    def get_gymnasts(self) -> List[GymnastView]:
        cached = self._cache_get(CACHE_KEY)
        if cached is not None:
            logger.debug("Returning cached FIG gymnast data")
            return [GymnastView(**g) for g in cached]

        logger.info("Fetching gymnast data from FIG API")
        try:
            gymnasts = [GymnastView.from_registry(a) for a in self._fetch()]
        except ExternalServiceError as e:
            logger.error(f"Failed to fetch gymnasts from FIG API: {e.message}")
            raise

        self._cache_set(CACHE_KEY, [asdict(g) for g in gymnasts])
        logger.info(f"Cached {len(gymnasts)} gymnasts from FIG API")
        return gymnasts

    def get_gymnasts_by_country(self, country: str) -> List[GymnastView]:
        country = country.upper()
        key = f"{CACHE_KEY}-{country}"
        cached = self._cache_get(key)
        if cached is not None:
            return [GymnastView(**g) for g in cached]

        try:
            gymnasts = [GymnastView.from_registry(a) for a in self._fetch(country)]
        except ExternalServiceError as e:
            if e.status_code in (429, 504):
                raise
            logger.warning(f"Country query failed for {country}, filtering the full list: {e.message}")
            gymnasts = [g for g in self.get_gymnasts() if g.country.upper() == country]

        self._cache_set(key, [asdict(g) for g in gymnasts])
        return gymnasts

    def get_gymnast_by_fig_id(self, fig_id: str) -> Optional[GymnastView]:
        for gymnast in self.get_gymnasts():
            if gymnast.fig_id == fig_id:
                return gymnast
        return None
