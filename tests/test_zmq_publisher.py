import zmq

from pubsub_log import (  # type: ignore[import]
  ChannelPropagationStrategy,
  LogLevel,
  ProviderConfig,
  PubSubLogProvider,
  ZmqPublisher,
)


def _subscriber(ctx, address, prefix):
  sock = ctx.socket(zmq.SUB)
  sock.setsockopt_string(zmq.SUBSCRIBE, prefix)
  sock.connect(address)
  return sock


def test_publisher_sends_channel_and_payload_frames():
  ctx = zmq.Context.instance()
  address = "inproc://pubsub-log-test-frames"
  publisher = ZmqPublisher(address, context=ctx)
  sub = _subscriber(ctx, address, "logs:")
  try:
    # PUB/SUB joins asynchronously; publish until the subscriber sees a message.
    received = None
    for _ in range(50):
      publisher.publish("logs:log", "hello")
      if sub.poll(100):
        received = sub.recv_multipart()
        break
    assert received == [b"logs:log", b"hello"]
  finally:
    sub.close(linger=0)
    publisher.close()


def test_subscriber_filters_on_channel_prefix():
  ctx = zmq.Context.instance()
  address = "inproc://pubsub-log-test-filter"
  publisher = ZmqPublisher(address, context=ctx)
  sub = _subscriber(ctx, address, "logs:log:error")
  try:
    received = None
    for _ in range(50):
      publisher.publish("logs:log:info", "skip")
      publisher.publish("logs:log:error", "keep")
      if sub.poll(100):
        received = sub.recv_multipart()
        break
    assert received == [b"logs:log:error", b"keep"]
  finally:
    sub.close(linger=0)
    publisher.close()


def test_provider_publishes_records_over_zmq():
  ctx = zmq.Context.instance()
  address = "inproc://pubsub-log-test-provider"
  publisher = ZmqPublisher(address, context=ctx)
  sub = _subscriber(ctx, address, "logs:")

  config = ProviderConfig(level=LogLevel.ALL, startup_delay=0, idle_timeout=0.01)
  provider = PubSubLogProvider(publisher, ChannelPropagationStrategy(), config)
  try:
    received = None
    for _ in range(50):
      provider.info("zmq", "over the wire")
      if sub.poll(100):
        received = sub.recv_multipart()
        break
    assert received is not None
    assert received[0] == b"logs:log"
    assert b"over the wire" in received[1]
  finally:
    provider.close()
    sub.close(linger=0)
    publisher.close()


def test_open_binds_before_first_publish():
  ctx = zmq.Context.instance()
  address = "inproc://pubsub-log-test-open"
  publisher = ZmqPublisher(address, context=ctx)
  publisher.open()
  sub = _subscriber(ctx, address, "")
  try:
    # Subscription handshake completes on an already-bound socket.
    assert not sub.poll(200)
    publisher.publish("logs:log", "first")
    assert sub.poll(2000)
    assert sub.recv_multipart() == [b"logs:log", b"first"]
  finally:
    sub.close(linger=0)
    publisher.close(linger=100)
