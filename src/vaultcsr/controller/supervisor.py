"""
Runs the token renewer and the request controller side by side.

Both loops share one stop event. Whichever loop exits first, for any reason,
sets the event so the other winds down at its next boundary; in-flight vault
calls are left to finish. The first error is re-raised once both loops have
returned.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from ..utils.logging import get_logger
from ..vault.renewer import Renewer
from .signer import Handler, RequestController

logger = get_logger(__name__)


def run_until_stopped(
    renewer: Renewer,
    controller: RequestController,
    handler: Handler,
    workers: int,
    stop_event: threading.Event,
) -> None:
    first_error: Optional[BaseException] = None

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="vaultcsr") as pool:
        futures = {
            pool.submit(renewer.run, stop_event): "renewer",
            pool.submit(controller.run, handler, workers, stop_event): "controller",
        }
        for future in futures:
            future.add_done_callback(lambda _: stop_event.set())

        for future in as_completed(futures):
            error = future.exception()
            if error is None:
                logger.info(f"{futures[future]} loop exited")
                continue
            logger.error(f"{futures[future]} loop failed: {error}")
            if first_error is None:
                first_error = error

    if first_error is not None:
        raise first_error
