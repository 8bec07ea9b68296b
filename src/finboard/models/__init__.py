"""
# Data Models Package

Pydantic models shared across the Finboard service.

- **`dashboard_models`**: breakpoints, widget rectangles, widget configuration and the
  dashboard state.
- **`market_data_models`**: provider endpoint descriptions, rate-limit decisions and
  API key status.
"""
