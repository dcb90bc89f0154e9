from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class Config:
    secret_key: str = "change-me"
    database_url: str = "sqlite:///dev.db"
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"
    factor_version: str = "DEFRA-2024-v1"
    factor_region: str = "UK"
    ai_months_limit: int = 12
    ai_period: str = "last_12_months"
    metrics_backend: str = "noop"

    @classmethod
    def from_env(cls) -> Config:
        return cls(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///dev.db"),
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4.1-mini"),
            factor_version=os.getenv("FACTOR_VERSION", "DEFRA-2024-v1"),
            factor_region=os.getenv("FACTOR_REGION", "UK"),
            ai_months_limit=int(os.getenv("AI_MONTHS_LIMIT", "12")),
            ai_period=os.getenv("AI_PERIOD", "last_12_months"),
            metrics_backend=os.getenv("METRICS_BACKEND", "noop"),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "OPENAI_API_KEY": self.openai_api_key,
            "OPENAI_MODEL": self.openai_model,
            "FACTOR_VERSION": self.factor_version,
            "FACTOR_REGION": self.factor_region,
            "AI_MONTHS_LIMIT": self.ai_months_limit,
            "AI_PERIOD": self.ai_period,
            "METRICS_BACKEND": self.metrics_backend,
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Lax",
        }
