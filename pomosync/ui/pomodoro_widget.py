# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import ttk
from typing import Callable

from pomosync.core.clock import format_time
from pomosync.core.timer_engine import SESSION_LABELS, EngineSnapshot
from pomosync.services.settings_service import SettingsService
from pomosync.services.timer_service import TimerService

TICK_MS = 1000


class PomodoroWidget(ttk.Frame):
    def __init__(
        self,
        master,
        timer_service: TimerService,
        settings_service: SettingsService,
        on_request_refresh: Callable[[], None],
    ):
        super().__init__(master)

        self.timer_service = timer_service
        self.settings_service = settings_service
        self.on_request_refresh = on_request_refresh

        self._tick_job = None

        self._build_ui()

        # wire callbacks from service -> widget UI
        self.timer_service.set_on_tick(self._on_tick)
        self.timer_service.set_on_phase_change(self._on_phase_change)
        self.timer_service.set_on_state_change(self._on_state_change)

        # initial render; a restored running timer keeps counting
        self._render(self.timer_service.get_snapshot())
        self._update_buttons()
        if self.timer_service.get_snapshot().is_running:
            self._ensure_tick_loop()

    def _build_ui(self):
        self.columnconfigure(0, weight=1)

        self.phase_var = tk.StringVar(value=SESSION_LABELS["work"])
        self.time_var = tk.StringVar(value="25:00")
        self.info_var = tk.StringVar(value="Ready")
        self.cycles_var = tk.StringVar(value="")

        title = ttk.Label(self, text="Pomodoro", font=("Sans", 12, "bold"))
        title.grid(row=0, column=0, sticky="w", pady=(0, 6))

        self.phase_label = ttk.Label(self, textvariable=self.phase_var)
        self.phase_label.grid(row=1, column=0, sticky="w")

        self.time_label = ttk.Label(
            self, textvariable=self.time_var, font=("Sans", 32, "bold")
        )
        self.time_label.grid(row=2, column=0, sticky="w", pady=(8, 4))

        self.progress = ttk.Progressbar(self, orient="horizontal", maximum=100)
        self.progress.grid(row=3, column=0, sticky="ew", pady=(0, 6))

        self.info_label = ttk.Label(self, textvariable=self.info_var)
        self.info_label.grid(row=4, column=0, sticky="w")
        ttk.Label(self, textvariable=self.cycles_var).grid(
            row=5, column=0, sticky="w", pady=(0, 10)
        )

        btns = ttk.Frame(self)
        btns.grid(row=6, column=0, sticky="w")

        self.start_btn = ttk.Button(btns, text="Start", command=self._start_pause)
        self.reset_btn = ttk.Button(btns, text="Reset", command=self._reset)
        self.skip_btn = ttk.Button(btns, text="Skip", command=self._skip)
        self.mute_btn = ttk.Button(btns, text="", command=self._toggle_mute)

        self.start_btn.grid(row=0, column=0, padx=(0, 6))
        self.reset_btn.grid(row=0, column=1, padx=(0, 6))
        self.skip_btn.grid(row=0, column=2, padx=(0, 6))
        self.mute_btn.grid(row=0, column=3)
        self._render_mute()

    def _update_buttons(self):
        snap = self.timer_service.get_snapshot()

        if snap.is_running:
            self.start_btn.config(text="Pause")
        elif snap.is_paused:
            self.start_btn.config(text="Resume")
        else:
            self.start_btn.config(text="Start")

        if snap.is_idle and snap.time_left == self.timer_service.engine.phase_duration():
            self.reset_btn.state(["disabled"])
        else:
            self.reset_btn.state(["!disabled"])

    def _start_pause(self):
        snap = self.timer_service.get_snapshot()
        if snap.is_running:
            self.timer_service.pause()
            self._stop_tick_loop()
        elif snap.is_paused:
            self.timer_service.resume()
            self._ensure_tick_loop()
        else:
            self.timer_service.start()
            self._ensure_tick_loop()
        self.on_request_refresh()

    def _reset(self):
        self.timer_service.reset()
        self._stop_tick_loop()
        self.on_request_refresh()

    def _skip(self):
        self.timer_service.skip()
        self._stop_tick_loop()
        self.on_request_refresh()

    def _toggle_mute(self):
        self.settings_service.toggle_muted()
        self._render_mute()

    def _render_mute(self):
        self.mute_btn.config(
            text="Unmute" if self.settings_service.is_muted() else "Mute"
        )

    # ---- Tick loop (UI-driven) ----
    def _ensure_tick_loop(self):
        if self._tick_job is None:
            self._tick_job = self.after(TICK_MS, self._tick_once)

    def _stop_tick_loop(self):
        if self._tick_job is not None:
            self.after_cancel(self._tick_job)
            self._tick_job = None

    def _tick_once(self):
        self._tick_job = None
        if self.timer_service.get_snapshot().is_running:
            self.timer_service.tick()
        # an auto-started break is still running after the tick
        if self.timer_service.get_snapshot().is_running:
            self._tick_job = self.after(TICK_MS, self._tick_once)

    # ---- Service callbacks ----
    def _on_tick(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons()

    def _on_phase_change(self, snap: EngineSnapshot):
        if snap.is_break:
            self.info_var.set("Break time.")
        else:
            self.info_var.set("Back to work.")
        self._render(snap, keep_info=True)
        self._update_buttons()
        self.on_request_refresh()

    def _on_state_change(self, snap: EngineSnapshot):
        self._render(snap)
        self._update_buttons()
        self._render_mute()

    def _render(self, snap: EngineSnapshot, keep_info: bool = False):
        self.time_var.set(format_time(snap.time_left))
        self.phase_var.set(SESSION_LABELS[snap.session_type])
        self.cycles_var.set(f"Completed cycles: {snap.cycles}")

        total = max(1, self.timer_service.engine.phase_duration())
        done = max(0, total - snap.time_left)
        self.progress["value"] = min(100, 100 * done / total)

        if keep_info:
            return
        if snap.is_running:
            self.info_var.set("Running...")
        elif snap.is_paused:
            self.info_var.set("Paused")
        else:
            self.info_var.set("Ready")
