"""Weather API proxy: current weather, daily-grouped forecasts and location search."""
