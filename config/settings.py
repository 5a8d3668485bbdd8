"""Configuration management for the payment ledger."""
import os
from dataclasses import dataclass

OUTPUT_FORMATS = ('csv', 'table')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class Settings:
    """Configuration settings for the payment ledger.

    Every value has a default, so the ledger runs without any environment
    configured. Settings.load() overrides the defaults from environment
    variables, which may come from a .env file.
    """

    # Storage Configuration
    transaction_db_path: str = ':memory:'
    dispute_cache_size: int = 50_000

    # Logging Configuration
    log_level: str = 'WARNING'
    log_file: str | None = None

    # Output Configuration
    output_format: str = 'csv'

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables.

        Returns:
            Settings: A Settings instance with values from environment variables.

        Raises:
            ValueError: If an environment variable holds an invalid value.
        """
        defaults = cls()

        cache_size_text = os.getenv('LEDGER_DISPUTE_CACHE_SIZE')
        if cache_size_text is None:
            cache_size = defaults.dispute_cache_size
        else:
            try:
                cache_size = int(cache_size_text)
            except ValueError:
                raise ValueError("LEDGER_DISPUTE_CACHE_SIZE must be an integer")
            if cache_size <= 0:
                raise ValueError("LEDGER_DISPUTE_CACHE_SIZE must be positive")

        log_level = os.getenv('LEDGER_LOG_LEVEL', defaults.log_level).upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"LEDGER_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        output_format = os.getenv('LEDGER_OUTPUT_FORMAT', defaults.output_format).lower()
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"LEDGER_OUTPUT_FORMAT must be one of {', '.join(OUTPUT_FORMATS)}")

        return cls(
            transaction_db_path=os.getenv('LEDGER_TRANSACTION_DB', defaults.transaction_db_path),
            dispute_cache_size=cache_size,
            log_level=log_level,
            log_file=os.getenv('LEDGER_LOG_FILE') or None,
            output_format=output_format,
        )
