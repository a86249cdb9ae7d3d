import threading
import time

from cyberassess.autosave import Debouncer


def test_rapid_triggers_coalesce_into_one_call():
    calls = []
    done = threading.Event()

    def save(value):
        calls.append(value)
        done.set()

    saver = Debouncer(save, wait=0.05)
    for i in range(5):
        saver.trigger(i)
    assert done.wait(2)
    time.sleep(0.15)
    assert calls == [4]
    assert not saver.pending


def test_flush_runs_pending_call_now():
    calls = []
    saver = Debouncer(calls.append, wait=30)
    saver.trigger("a")
    saver.trigger("b")
    assert saver.pending
    assert saver.flush() is True
    assert calls == ["b"]
    assert saver.flush() is False
    assert calls == ["b"]


def test_cancel_drops_pending_call():
    calls = []
    saver = Debouncer(calls.append, wait=0.05)
    saver.trigger("a")
    saver.cancel()
    time.sleep(0.15)
    assert calls == []


def test_callback_error_does_not_escape_timer(caplog):
    done = threading.Event()

    def save(_value):
        done.set()
        raise RuntimeError("disk full")

    saver = Debouncer(save, wait=0.01)
    saver.trigger(1)
    assert done.wait(2)
    time.sleep(0.05)
    assert not saver.pending
    assert "Auto-save failed" in caplog.text


def test_debounced_answers_are_saved_once(service, repository, monkeypatch):
    record = service.create_assessment("nist-csf-v2")
    saves = []
    original = repository.save_assessment

    def counting_save(rec):
        saves.append(rec.id)
        return original(rec)

    monkeypatch.setattr(repository, "save_assessment", counting_save)

    saver = Debouncer(lambda item: service.set_responses(*item), wait=30)
    saver.trigger((record.id, {"gv.oc-q1": 1}))
    saver.trigger((record.id, {"gv.oc-q1": 2}))
    saver.trigger((record.id, {"gv.oc-q1": 2, "gv.oc-q2": 3}))
    saver.flush()

    assert saves == [record.id]
    assert repository.get_assessment(record.id).responses == {"gv.oc-q1": 2, "gv.oc-q2": 3}


def test_flush_waits_for_running_timer_save():
    started = threading.Event()
    calls = []

    def slow_save(value):
        started.set()
        time.sleep(0.3)
        calls.append(value)

    saver = Debouncer(slow_save, wait=0.01)
    saver.trigger(1)
    assert started.wait(2)
    assert saver.flush() is True
    assert calls == [1]
    assert saver.flush() is False
