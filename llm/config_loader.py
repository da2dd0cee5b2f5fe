"""LLM configuration loader"""

import logging
import random

from llm.openai_wrapper import OpenAIWrapper

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("base_url", "api_key", "model")


def validate_llm_config(config: dict) -> list[str]:
    """Return the required keys missing from one LLM config entry"""
    return [key for key in REQUIRED_KEYS if not config.get(key)]


def create_random_llm_wrapper(llm_configs: list[dict]) -> OpenAIWrapper | None:
    """Create an OpenAI wrapper using a randomly selected LLM config

    Args:
        llm_configs: The ``llm`` section of config.json

    Returns:
        OpenAIWrapper instance or None if no usable configs are available
    """
    usable = []
    for config in llm_configs:
        missing = validate_llm_config(config)
        if missing:
            logger.warning(f"Skipping LLM config for model {config.get('model')}: missing {', '.join(missing)}")
            continue
        usable.append(config)

    if not usable:
        logger.warning("No LLM configurations available")
        return None

    # Randomly select one config
    config = random.choice(usable)

    logger.info(f"Selected LLM config: {config.get('model')} at {config.get('base_url')}")

    return OpenAIWrapper(
        base_url=config["base_url"],
        api_key=config["api_key"],
        model=config["model"],
        timeout=config.get("timeout", 60.0),
        max_retries=config.get("max_retries", 2),
        organization=config.get("organization"),
        project=config.get("project"),
        temperature=config.get("temperature", 0.7),
        max_tokens=config.get("max_tokens", 4096),
    )
