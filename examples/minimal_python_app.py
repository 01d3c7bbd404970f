import logging
import os
import time

from pubsub_log import (  # type: ignore[import]
  ChannelPropagationStrategy,
  LogLevel,
  ProviderConfig,
  PubSubLogProvider,
  ZmqPublisher,
  operation_context,
  setup_logging,
)


def main() -> None:
  # Minimal configuration via environment variables
  os.environ.setdefault("PUBSUB_LOG_CHANNEL_PREFIX", "example-app")

  config = ProviderConfig.from_env()
  publisher = ZmqPublisher(config.publisher_address)
  # Bind before logging so subscribers have time to connect
  publisher.open()
  time.sleep(0.5)

  provider = PubSubLogProvider(publisher, ChannelPropagationStrategy(), config)
  provider.set_level(LogLevel.ALL)

  logger = logging.getLogger("example_app")
  logging.basicConfig(level=logging.INFO)
  setup_logging(provider, logger)

  with operation_context("startup"):
    logger.info("Example INFO log from minimal app")
    provider.debug("example_app", {"workers": 4, "region": "eu"}, "settings.json")

  try:
    1 / 0
  except ZeroDivisionError:
    logger.exception("Example ERROR log with exception")

  # Drain the background queue before exit
  provider.close()
  publisher.close(linger=1000)


if __name__ == "__main__":
  main()
