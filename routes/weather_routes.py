import math

from flask import Blueprint, jsonify, request
from flask_cors import CORS

from utils.app_context import get_weather

weather_bp = Blueprint('weather', __name__)
CORS(weather_bp)


@weather_bp.route('', methods=['GET'])
def get_weather_data():
    """
    Current weather for the given coordinates (fallback location when omitted)
    ---
    tags:
      - Weather
    parameters:
      - in: query
        name: lat
        type: number
      - in: query
        name: lon
        type: number
    responses:
      200:
        description: >
          "{temperature, feelsLike, description, icon, iconUrl, city, humidity,
          windSpeed, refreshSeconds}"
      400:
        description: Coordinates are not numbers.
    """
    lat = request.args.get('lat')
    lon = request.args.get('lon')
    try:
        lat = float(lat) if lat not in (None, '') else None
        lon = float(lon) if lon not in (None, '') else None
    except ValueError:
        return jsonify({"error": "lat and lon must be numbers"}), 400
    if any(value is not None and not math.isfinite(value) for value in (lat, lon)):
        return jsonify({"error": "lat and lon must be numbers"}), 400
    return jsonify(get_weather().get_weather(lat, lon)), 200
