"""
Runtime settings for the sales plan board.

Defaults reproduce the demo window; any of them can be overridden through
environment variables (a local .env file is loaded first).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_START_DATE = "2024-12-01"
DEFAULT_END_DATE = "2025-02-28"
# Actuals exist only for dates strictly before this one.
DEFAULT_TODAY = "2025-01-08"

# LiteLLM model string shared by the review agent and the advisor client.
DEFAULT_MODEL = "openai/gpt-4o-mini"


def load_env() -> None:
    """Load .env from the working directory (or its parents) without overriding set vars."""
    load_dotenv(find_dotenv(usecwd=True))


@dataclass(frozen=True)
class PlanSettings:
    start_date: str = DEFAULT_START_DATE
    end_date: str = DEFAULT_END_DATE
    today: str = DEFAULT_TODAY
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "PlanSettings":
        load_env()
        raw_seed = os.getenv("SALES_PLAN_SEED", "").strip()
        return cls(
            start_date=os.getenv("SALES_PLAN_START_DATE", DEFAULT_START_DATE),
            end_date=os.getenv("SALES_PLAN_END_DATE", DEFAULT_END_DATE),
            today=os.getenv("SALES_PLAN_TODAY", DEFAULT_TODAY),
            seed=int(raw_seed) if raw_seed else None,
        )


def model_name() -> str:
    load_env()
    return os.getenv("SALES_PLAN_MODEL", DEFAULT_MODEL)
