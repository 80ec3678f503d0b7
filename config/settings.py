"""Application settings and configuration."""

import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).parent.parent

# Data paths
DATA_DIR = Path(os.getenv("FARM_DATA_DIR", str(BASE_DIR / "data")))

LOG_LEVEL = os.getenv("FARM_LOG_LEVEL", "INFO").upper()

# Cost aggregation settings
COST_SETTINGS = {
    "default_equipment_hourly_cost": 50.0,  # €/h when equipment has no rate
    "default_product_unit_price": 5.0,  # €/unit when product has no price
    "labor_hourly_rate": 10.0,  # €/h
    "default_states": ["completed", "pending"],
    "efficiency_time_weight": 0.6,
    "efficiency_cost_weight": 0.4,
    "efficiency_benchmark_cost_per_hour": 100.0,
    "default_time_efficiency": 50.0,
    "hours_per_activity": 8.0,  # cost-per-hour denominator
}

# Operational efficiency and trend settings
EFFICIENCY_SETTINGS = {
    "time_weight": 0.4,
    "cost_weight": 0.4,
    "yield_weight": 0.2,
    "benchmark_cost_per_hour": 75.0,
    "default_time_efficiency": 50.0,
    "trend_min_points": 3,
    "forecast_periods": 3,
    "default_harvest_interval_days": 365.0,
}

# Expected yield per crop type (kg/ha)
EXPECTED_YIELD_KG_PER_HA = {
    "cereal": 5000.0,
    "horticultural": 20000.0,
    "fruit": 15000.0,
    "vine": 8000.0,
    "olive": 3000.0,
    "tuber": 25000.0,
    "oilseed": 3500.0,
    "other": 10000.0,
}

# Alert and insight thresholds
ALERT_SETTINGS = {
    "cost_high_water_mark": 10000.0,
    "equipment_share_limit": 0.7,
    "minimum_expected_ratio_pct": 60.0,
    "productivity_drop_pct": -15.0,
    "exceptional_ratio_pct": 120.0,
    "strong_trend_strength": 0.10,
    "high_variation_pct": 20.0,
}

# API settings
API_SETTINGS = {
    "title": "Farm Analytics API",
    "description": "Cost and productivity aggregation for farm activities",
    "version": "1.0.0",
}
