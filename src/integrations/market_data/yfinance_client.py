from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import yfinance as yf

logger = logging.getLogger(__name__)


class YFinanceClient:
    def fetch_closes(self, symbol: str, period: str = "5d") -> pd.DataFrame:
        logger.info("Fetching yfinance closes", extra={"symbol": symbol, "period": period})
        df = yf.Ticker(symbol).history(interval="1d", period=period, auto_adjust=False)
        if df.empty:
            raise ValueError(f"No price data returned for {symbol}")

        out = df.reset_index().rename(columns={"Datetime": "timestamp", "Date": "timestamp", "Close": "close"})
        if "close" not in out.columns:
            raise ValueError(f"Missing close column for {symbol}")

        out["close"] = pd.to_numeric(out["close"], errors="coerce")
        out = out.dropna(subset=["close"]).sort_values("timestamp").reset_index(drop=True)
        if out.empty:
            raise ValueError(f"No valid closes after cleaning for {symbol}")
        return out[["timestamp", "close"]]

    def fetch_latest_close(self, symbol: str, period: str = "5d") -> float:
        df = self.fetch_closes(symbol=symbol, period=period)
        close = float(df.iloc[-1]["close"])
        if np.isnan(close) or np.isinf(close):
            raise ValueError(f"Latest close for {symbol} is not a finite number")
        return close
