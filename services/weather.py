import logging
import math
import time
from datetime import datetime

import requests

logger = logging.getLogger(__name__)

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"

# Joinville - SC
FALLBACK_COORDINATES = (-26.3044, -48.8461)
CACHE_SECONDS = 5 * 60
MAX_CACHE_ENTRIES = 64
REFRESH_SECONDS = 30 * 60


def icon_url(icon_code):
    return ICON_URL.format(icon=icon_code)


def demo_weather(hour=None):
    """Fixed readings by time of day, used when the provider is unavailable."""
    if hour is None:
        hour = datetime.now().hour
    if 6 <= hour < 12:
        data = {'temperature': 22, 'feelsLike': 24, 'description': 'sunny', 'icon': '01d',
                'humidity': 65, 'windSpeed': 12}
    elif 12 <= hour < 18:
        data = {'temperature': 25, 'feelsLike': 28, 'description': 'partly cloudy', 'icon': '02d',
                'humidity': 60, 'windSpeed': 15}
    elif 18 <= hour < 22:
        data = {'temperature': 20, 'feelsLike': 22, 'description': 'cloudy', 'icon': '03d',
                'humidity': 75, 'windSpeed': 8}
    else:
        data = {'temperature': 18, 'feelsLike': 16, 'description': 'mist', 'icon': '50d',
                'humidity': 85, 'windSpeed': 5}
    data['city'] = 'Joinville'
    data['demo'] = True
    return data


def parse_openweather(payload):
    weather = (payload.get('weather') or [{}])[0]
    main = payload['main']
    return {
        'temperature': round(main['temp']),
        'feelsLike': round(main['feels_like']),
        'description': weather.get('description', ''),
        'icon': weather.get('icon', ''),
        'city': payload.get('name', ''),
        'humidity': main.get('humidity'),
        # m/s -> km/h
        'windSpeed': round(payload.get('wind', {}).get('speed', 0) * 3.6),
        'demo': False,
    }


class WeatherService:
    def __init__(self, api_key=None, session=None, timeout=10, clock=time.monotonic, lang='en'):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.clock = clock
        self.lang = lang
        self._cache = {}

    def _cache_key(self, lat, lon):
        return (round(lat, 2), round(lon, 2))

    def fetch(self, lat, lon):
        response = self.session.get(
            OPENWEATHER_URL,
            params={'lat': lat, 'lon': lon, 'appid': self.api_key, 'units': 'metric', 'lang': self.lang},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return parse_openweather(response.json())

    def _remember(self, key, now, data):
        # bounded: expired entries go first, then the oldest
        for stale in [k for k, (at, _) in self._cache.items() if now - at >= CACHE_SECONDS]:
            del self._cache[stale]
        while len(self._cache) >= MAX_CACHE_ENTRIES:
            oldest = min(self._cache, key=lambda k: self._cache[k][0])
            del self._cache[oldest]
        self._cache[key] = (now, data)

    def get_weather(self, lat=None, lon=None):
        if lat is None or lon is None or not (math.isfinite(lat) and math.isfinite(lon)):
            lat, lon = FALLBACK_COORDINATES

        key = self._cache_key(lat, lon)
        cached = self._cache.get(key)
        now = self.clock()
        if cached and now - cached[0] < CACHE_SECONDS:
            return dict(cached[1])

        if not self.api_key:
            logger.warning("OpenWeatherMap API key not configured. Using demo data.")
            data = demo_weather()
        else:
            try:
                data = self.fetch(lat, lon)
            except (requests.RequestException, KeyError, TypeError, ValueError) as e:
                logger.error("Error fetching weather data: %s", e)
                data = demo_weather()

        data['iconUrl'] = icon_url(data['icon'])
        data['refreshSeconds'] = REFRESH_SECONDS
        self._remember(key, now, data)
        return dict(data)
