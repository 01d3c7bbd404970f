import threading

from pubsub_log.queue import EventQueue  # type: ignore[import]


def test_fifo_order_and_empty_dequeue():
  q = EventQueue()
  assert q.try_dequeue() == (None, False)

  for i in range(5):
    q.enqueue(f"m{i}")
  assert len(q) == 5

  out = []
  while True:
    item, found = q.try_dequeue()
    if not found:
      break
    out.append(item)
  assert out == [f"m{i}" for i in range(5)]
  assert q.empty()


def test_wait_dequeue_times_out_when_empty():
  q = EventQueue()
  assert q.wait_dequeue(0.01) == (None, False)


def test_wait_dequeue_wakes_on_enqueue():
  q = EventQueue()
  timer = threading.Timer(0.05, q.enqueue, args=("late",))
  timer.start()
  try:
    assert q.wait_dequeue(2.0) == ("late", True)
  finally:
    timer.cancel()


def test_concurrent_producers_never_lose_items():
  q = EventQueue()

  def produce(n):
    for i in range(200):
      q.enqueue(f"{n}-{i}")

  threads = [threading.Thread(target=produce, args=(n,)) for n in range(8)]
  for t in threads:
    t.start()
  for t in threads:
    t.join()

  assert len(q) == 8 * 200
