from types import SimpleNamespace

from pomosync.services import notification_service
from pomosync.services.notification_service import NotificationService


def test_session_complete_message(notifier, recorder):
    assert notifier.notify_session_complete("Work") is True
    assert recorder.notifications == [
        ("Pomodoro Session Complete!", "Work session has finished.")
    ]


def test_break_complete_message(notifier, recorder):
    notifier.notify_break_complete()
    assert recorder.notifications == [("Break Time Over!", "Time to get back to work.")]


def test_failed_sender_does_not_raise(recorder):
    def broken(title, body):
        raise OSError("no display")

    svc = NotificationService(sender=broken, bell=recorder.bell)
    assert svc.show_notification("Hi") is False


def test_default_sender_uses_plyer(monkeypatch, recorder):
    sent = []
    monkeypatch.setattr(
        notification_service, "notification", SimpleNamespace(notify=lambda **kw: sent.append(kw))
    )
    monkeypatch.setattr(notification_service, "platform", "linux")
    svc = NotificationService(bell=recorder.bell)
    assert svc.notify_break_complete() is True
    assert sent == [
        {
            "title": "Break Time Over!",
            "message": "Time to get back to work.",
            "app_name": "pomosync",
            "timeout": 5,
        }
    ]


def test_unsupported_platform(monkeypatch, recorder):
    monkeypatch.setattr(notification_service, "platform", "ios")
    svc = NotificationService(bell=recorder.bell)
    assert svc.is_supported() is False
    assert svc.show_notification("Hi") is False


def test_sound_respects_mute(notifier, recorder):
    notifier.play_sound(muted=True)
    assert recorder.bells == 0
    notifier.play_sound()
    assert recorder.bells == 1


def test_set_bell(notifier, recorder):
    calls = []
    notifier.set_bell(lambda: calls.append("ding"))
    notifier.play_sound()
    assert calls == ["ding"]
    assert recorder.bells == 0
