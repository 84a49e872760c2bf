"""
Store x Brand Grocery Sales Forecasting

Fits mean, naive, drift, ARIMA and ETS models to every store x brand series of
each rolling-origin training split, forecasts the held-out weeks and evaluates
forecast accuracy.
"""

__version__ = "1.0.0"
__author__ = "Forecasting Team"
