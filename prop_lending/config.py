"""Configuration management for prop-lending."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from prop_lending.exceptions import ConfigurationError


@dataclass
class KafkaConfig:
    """Kafka producer configuration for lifecycle events."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "dev.lending"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "lending"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class LendingPolicyConfig:
    """Underwriting limits applied to loan requests.

    ``ltv_cap`` bounds the total loan amount as a fraction of the appraised
    property value. ``suggested_ltv`` is the pre-filled amount offered to
    borrowers and never exceeds the cap.
    """

    ltv_cap: float = 0.8
    suggested_ltv: float = 0.7
    max_interest_rate: float = 100.0

    def __post_init__(self) -> None:
        if not 0 < self.ltv_cap <= 1:
            raise ConfigurationError(f"ltv_cap must be in (0, 1], got {self.ltv_cap}")
        if not 0 < self.suggested_ltv <= self.ltv_cap:
            raise ConfigurationError(
                f"suggested_ltv must be in (0, ltv_cap], got {self.suggested_ltv}"
            )
        if self.max_interest_rate <= 0:
            raise ConfigurationError(
                f"max_interest_rate must be positive, got {self.max_interest_rate}"
            )


@dataclass
class ChainConfig:
    """Contract addresses and token units."""

    property_token_address: str = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    loan_contract_address: str = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
    token_decimals: int = 18


@dataclass
class OutputConfig:
    """Output configuration for file sinks."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LendingConfig:
    """Main configuration for prop-lending."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    policy: LendingPolicyConfig = field(default_factory=LendingPolicyConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LendingConfig":
        """Create config from environment variables."""
        try:
            kafka = KafkaConfig(
                bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
                acks=os.getenv("KAFKA_ACKS", "all"),
                topic_prefix=os.getenv("TOPIC_PREFIX", "dev.lending"),
            )

            postgres = PostgresConfig(
                host=os.getenv("POSTGRES_HOST", "localhost"),
                port=int(os.getenv("POSTGRES_PORT", "5432")),
                database=os.getenv("POSTGRES_DB", "lending"),
                user=os.getenv("POSTGRES_USER", "postgres"),
                password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            )

            policy = LendingPolicyConfig(
                ltv_cap=float(os.getenv("LTV_CAP", "0.8")),
                suggested_ltv=float(os.getenv("SUGGESTED_LTV", "0.7")),
                max_interest_rate=float(os.getenv("MAX_INTEREST_RATE", "100")),
            )

            chain = ChainConfig(
                property_token_address=os.getenv(
                    "PROPERTY_TOKEN_ADDRESS", ChainConfig.property_token_address
                ),
                loan_contract_address=os.getenv(
                    "LOAN_CONTRACT_ADDRESS", ChainConfig.loan_contract_address
                ),
                token_decimals=int(os.getenv("TOKEN_DECIMALS", "18")),
            )

            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric environment value: {e}") from e

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            kafka=kafka,
            postgres=postgres,
            policy=policy,
            chain=chain,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
