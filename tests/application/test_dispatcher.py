from __future__ import annotations

import threading
from typing import Any

import pytest

from lib_log_http.application.dispatcher import LOGGED_EVENT, LogDispatcher
from lib_log_http.domain import TransportConfig
from lib_log_http.domain.request import OutgoingRequest


def _dispatcher(scheduler, transport, **kwargs: Any) -> LogDispatcher:
    config = kwargs.pop("config", None) or TransportConfig.from_options(url="http://h", path="log")
    return LogDispatcher(config, transport=transport, scheduler=scheduler, **kwargs)


def test_dispatch_invokes_done_once_and_defers_logged_event(scheduler, transport) -> None:
    dispatcher = _dispatcher(scheduler, transport)
    logged: list[dict[str, Any]] = []
    done_calls: list[int] = []
    dispatcher.add_listener(LOGGED_EVENT, logged.append)

    record = {"level": "info", "message": "hello"}
    dispatcher.dispatch(record, lambda: done_calls.append(1))

    assert done_calls == [1]
    assert logged == []
    assert transport.sent == []

    scheduler.run_pending()

    assert logged == [record]
    assert [request.url for request in transport.sent] == ["http://h/log"]


def test_done_is_called_when_transport_fails(scheduler, failing_transport) -> None:
    dispatcher = _dispatcher(scheduler, failing_transport)
    done_calls: list[int] = []

    dispatcher.dispatch({"message": "m"}, lambda: done_calls.append(1))
    scheduler.run_pending()

    assert done_calls == [1]
    assert len(failing_transport.sent) == 1


def test_failures_are_silent_by_default(scheduler, failing_transport) -> None:
    dispatcher = _dispatcher(scheduler, failing_transport)

    dispatcher.dispatch({"message": "m"})
    scheduler.run_pending()

    assert failing_transport.sent


def test_failure_hook_and_diagnostics_observe_failures(scheduler, failing_transport) -> None:
    failures: list[tuple[OutgoingRequest, BaseException]] = []
    diagnostics: list[tuple[str, dict[str, Any]]] = []
    dispatcher = _dispatcher(
        scheduler,
        failing_transport,
        on_failure=lambda request, exc: failures.append((request, exc)),
        diagnostic=lambda name, payload: diagnostics.append((name, payload)),
    )

    dispatcher.dispatch({"message": "m"})
    scheduler.run_pending()

    assert len(failures) == 1
    assert failures[0][0].url == "http://h/log"
    assert isinstance(failures[0][1], ConnectionError)
    assert diagnostics[0][0] == "http_delivery_failed"
    assert "connection refused" in diagnostics[0][1]["exception"]


def test_diagnostic_reports_successful_delivery(scheduler, transport) -> None:
    diagnostics: list[tuple[str, dict[str, Any]]] = []
    dispatcher = _dispatcher(scheduler, transport, diagnostic=lambda name, payload: diagnostics.append((name, payload)))

    dispatcher.dispatch({"message": "m"})
    scheduler.run_pending()

    assert diagnostics == [("http_delivered", {"method": "POST", "url": "http://h/log", "status": None})]


def test_raising_hooks_do_not_escape(scheduler, failing_transport, caplog: pytest.LogCaptureFixture) -> None:
    def boom(*_args: object) -> None:
        raise RuntimeError("hook failed")

    dispatcher = _dispatcher(scheduler, failing_transport, on_failure=boom, diagnostic=boom)
    dispatcher.add_listener(LOGGED_EVENT, boom)
    done_calls: list[int] = []

    dispatcher.dispatch({"message": "m"}, lambda: done_calls.append(1))
    scheduler.run_pending()

    assert done_calls == [1]
    messages = [record.getMessage() for record in caplog.records]
    assert "'logged' listener raised; continuing" in messages
    assert "Delivery failure hook raised; continuing" in messages
    assert "Diagnostic hook raised while reporting http_delivery_failed" in messages


def test_scheduling_failure_still_calls_done(scheduler, transport) -> None:
    diagnostics: list[str] = []
    dispatcher = _dispatcher(scheduler, transport, diagnostic=lambda name, _payload: diagnostics.append(name))
    logged: list[dict[str, Any]] = []
    dispatcher.add_listener(LOGGED_EVENT, logged.append)
    scheduler.closed = True
    done_calls: list[int] = []

    dispatcher.dispatch({"message": "m"}, lambda: done_calls.append(1))

    assert done_calls == [1]
    assert transport.sent == []
    assert diagnostics == ["scheduler_unavailable"]
    assert logged == [{"message": "m"}]


def test_spawn_failure_reports_delivery_failure(scheduler, transport) -> None:
    failures: list[BaseException] = []
    dispatcher = _dispatcher(scheduler, transport, on_failure=lambda _request, exc: failures.append(exc))

    def refuse(coro):
        raise RuntimeError("loop gone")

    scheduler.spawn = refuse  # type: ignore[method-assign]
    done_calls: list[int] = []
    dispatcher.dispatch({"message": "m"}, lambda: done_calls.append(1))

    assert done_calls == [1]
    assert [str(exc) for exc in failures] == ["loop gone"]


def test_disabled_transport_acknowledges_without_sending(scheduler, transport) -> None:
    config = TransportConfig.from_options(url="http://h", enabled=False)
    dispatcher = _dispatcher(scheduler, transport, config=config)
    logged: list[dict[str, Any]] = []
    dispatcher.add_listener(LOGGED_EVENT, logged.append)
    done_calls: list[int] = []

    dispatcher.dispatch({"message": "m"}, lambda: done_calls.append(1))
    scheduler.run_pending()

    assert done_calls == [1]
    assert logged == [{"message": "m"}]
    assert transport.sent == []


def test_remove_listener_and_unknown_events(scheduler, transport) -> None:
    dispatcher = _dispatcher(scheduler, transport)
    logged: list[dict[str, Any]] = []
    dispatcher.add_listener(LOGGED_EVENT, logged.append)
    dispatcher.remove_listener(LOGGED_EVENT, logged.append)

    dispatcher.dispatch({"message": "m"})
    scheduler.run_pending()

    assert logged == []
    with pytest.raises(ValueError, match="Unknown dispatcher event"):
        dispatcher.add_listener("emitted", logged.append)


def test_close_drains_and_closes_transport(scheduler, transport) -> None:
    dispatcher = _dispatcher(scheduler, transport, close_timeout=2.0)
    dispatcher.dispatch({"message": "m"})

    dispatcher.close()
    dispatcher.close()

    assert dispatcher.closed is True
    assert scheduler.close_calls == [2.0]
    assert scheduler.finalized is True
    assert transport.closed is True
    assert len(transport.sent) == 1


def test_dispatch_after_close_signals_logged_without_sending(scheduler, transport) -> None:
    diagnostics: list[str] = []
    dispatcher = _dispatcher(scheduler, transport, diagnostic=lambda name, _payload: diagnostics.append(name))
    dispatcher.close(timeout=0.5)
    logged: list[dict[str, Any]] = []
    dispatcher.add_listener(LOGGED_EVENT, logged.append)
    done_calls: list[int] = []

    dispatcher.dispatch({"message": "m"}, lambda: done_calls.append(1))

    assert done_calls == [1]
    assert diagnostics == ["dispatcher_closed"]
    assert logged == [{"message": "m"}]
    assert scheduler.close_calls == [0.5]


def test_context_manager_closes(scheduler, transport) -> None:
    with _dispatcher(scheduler, transport) as dispatcher:
        dispatcher.dispatch({"message": "m"})
    assert transport.closed is True


def test_record_is_not_mutated_by_dispatch(scheduler, transport) -> None:
    config = TransportConfig.from_options(url="http://h", body_addons={"a": 1}, auth="XYZ")
    dispatcher = _dispatcher(scheduler, transport, config=config)
    record = {"message": "m", "a": 0}

    dispatcher.dispatch(record)
    scheduler.run_pending()

    assert record == {"message": "m", "a": 0}
    assert transport.sent[0].body == {"message": "m", "a": 1}


def test_two_dispatchers_in_parallel_threads_keep_their_auth(new_scheduler, new_transport) -> None:
    pairs = []
    for secret in ("AAA", "BBB"):
        pair_scheduler, pair_transport = new_scheduler(), new_transport()
        config = TransportConfig.from_options(url="http://h", auth=secret)
        pairs.append((LogDispatcher(config, transport=pair_transport, scheduler=pair_scheduler), pair_scheduler, pair_transport))
    barrier = threading.Barrier(len(pairs))

    def worker(dispatcher: LogDispatcher) -> None:
        barrier.wait()
        for index in range(100):
            dispatcher.dispatch({"message": str(index)})

    threads = [threading.Thread(target=worker, args=(dispatcher,)) for dispatcher, _, _ in pairs]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    for _, pair_scheduler, _ in pairs:
        pair_scheduler.run_pending()

    (_, _, transport_a), (_, _, transport_b) = pairs
    assert {request.headers["authorization"] for request in transport_a.sent} == {"Bearer AAA"}
    assert {request.headers["authorization"] for request in transport_b.sent} == {"Bearer BBB"}
    assert len(transport_a.sent) == len(transport_b.sent) == 100
