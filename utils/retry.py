import time


def backoff_delays(base_delay=0.4, max_delay=None):
    """지수 백오프 대기시간 생성기 (max_delay 로 상한)"""
    i = 0
    while True:
        delay = base_delay * (2 ** i)
        if max_delay is not None:
            delay = min(delay, max_delay)
        yield delay
        i += 1


def _retry(fn, tries=3, base_delay=0.4, exceptions=(Exception,), sleep=time.sleep):
    """지수 백오프 간단 재시도"""
    last_exc = None
    delays = backoff_delays(base_delay)
    for i in range(tries):
        try:
            return fn()
        except exceptions as e:
            last_exc = e
            if i < tries - 1:
                sleep(next(delays))
    raise last_exc
