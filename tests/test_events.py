import pytest

from jsonconfig import EVENT_NAMES, ConfigEvents, EventHook, JsonConfig, JsonConfigOptions


class Settings(JsonConfig):
    text: str = ""


class Recording(JsonConfig):
    """Records lifecycle hooks through overrides instead of subscriptions."""

    value: int = 0

    def on_reading(self):
        self.value += 1
        super().on_reading()


def recorder(order):
    return {name: (lambda config, name=name: order.append(name)) for name in EVENT_NAMES}


def test_load_create_branch_order(workdir):
    order = []
    Settings.load("s.json", listeners=recorder(order))
    assert order == ["creating", "before_save", "after_save", "loaded"]


def test_load_create_without_save_order(workdir):
    order = []
    Settings.load("s.json", JsonConfigOptions(save_on_create=False), listeners=recorder(order))
    assert order == ["creating", "loaded"]


def test_load_read_branch_order(workdir):
    (workdir / "s.json").write_text('{"text": "x"}', encoding="utf-8")
    order = []
    Settings.load("s.json", listeners=recorder(order))
    assert order == ["reading", "loaded"]


def test_read_fires_reading_only(workdir):
    (workdir / "s.json").write_text('{"text": "x"}', encoding="utf-8")
    order = []
    Settings.read("s.json", listeners=recorder(order))
    assert order == ["reading"]


def test_no_events_when_load_is_absent(workdir):
    (workdir / "s.json").write_text("null", encoding="utf-8")
    order = []
    assert Settings.load("s.json", listeners=recorder(order)) is None
    assert order == []


def test_handlers_see_bound_path(workdir):
    seen = []
    Settings.load("s.json", listeners={"creating": lambda config: seen.append(config.path)})
    assert seen == ["s.json"]


def test_save_events_bracket_the_write(workdir):
    settings = Settings.load("s.json", JsonConfigOptions(save_on_create=False))
    target = workdir / "s.json"
    seen = []
    settings.events.before_save.subscribe(lambda config: seen.append(("before", target.exists())))
    settings.events.after_save.subscribe(lambda config: seen.append(("after", target.exists())))

    settings.save()

    assert seen == [("before", False), ("after", True)]


def test_try_save_fires_save_events(workdir):
    settings = Settings.load("s.json")
    order = []
    settings.events.before_save.subscribe(lambda config: order.append("before_save"))
    settings.events.after_save.subscribe(lambda config: order.append("after_save"))

    assert settings.try_save()
    assert order == ["before_save", "after_save"]


def test_failed_save_skips_after_save(workdir):
    settings = Settings.load("s.json")
    order = []
    settings.events.before_save.subscribe(lambda config: order.append("before_save"))
    settings.events.after_save.subscribe(lambda config: order.append("after_save"))

    assert not settings.try_save(workdir / "missing" / "s.json")
    assert order == ["before_save"]


def test_events_are_per_instance(workdir):
    first = Settings.load("a.json")
    second = Settings.load("b.json")
    calls = []
    first.events.after_save.subscribe(calls.append)

    second.save()
    assert calls == []

    first.save()
    assert calls == [first]


def test_listener_iterables(workdir):
    calls = []
    Settings.load("s.json", listeners={"loaded": [lambda c: calls.append(1), lambda c: calls.append(2)]})
    assert calls == [1, 2]


def test_unknown_listener_name(workdir):
    with pytest.raises(ValueError, match="Unknown event"):
        Settings.load("s.json", listeners={"saved": lambda config: None})


def test_overridden_hook(workdir):
    (workdir / "r.json").write_text('{"value": 10}', encoding="utf-8")
    calls = []
    recording = Recording.load("r.json", listeners={"reading": calls.append})

    assert recording.value == 11
    assert calls == [recording]


def test_event_hook_subscribe_and_unsubscribe():
    hook = EventHook("loaded")
    calls = []

    @hook.subscribe
    def handler(sender):
        calls.append(sender)

    assert handler in hook
    assert len(hook) == 1
    hook.fire("config")
    assert calls == ["config"]

    hook.unsubscribe(handler)
    hook.fire("config")
    assert calls == ["config"]
    assert len(hook) == 0


def test_event_hook_fires_in_registration_order():
    hook = EventHook("after_save")
    order = []
    hook.subscribe(lambda sender: order.append("first"))
    hook.subscribe(lambda sender: order.append("second"))

    hook.fire(None)

    assert order == ["first", "second"]


def test_event_hook_handler_may_unsubscribe_itself():
    hook = EventHook("loaded")
    calls = []

    def once(sender):
        calls.append(sender)
        hook.unsubscribe(once)

    hook.subscribe(once)
    hook.fire(1)
    hook.fire(2)

    assert calls == [1]


def test_event_hook_errors():
    hook = EventHook("reading")
    with pytest.raises(ValueError):
        hook.unsubscribe(print)
    with pytest.raises(TypeError):
        hook.subscribe("not callable")


def test_handler_exception_propagates(workdir):
    def fail(config):
        raise RuntimeError("handler failed")

    with pytest.raises(RuntimeError, match="handler failed"):
        Settings.load("s.json", listeners={"creating": fail})


def test_config_events_lookup():
    events = ConfigEvents()
    assert [hook.name for hook in events] == list(EVENT_NAMES)
    assert events.get("before_save") is events.before_save
    with pytest.raises(ValueError):
        events.get("saving")
