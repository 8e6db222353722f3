# -*- coding: utf-8 -*-

import tkinter as tk
from tkinter import messagebox, ttk

from pomosync.errors import ValidationError
from pomosync.services.settings_service import DURATION_LIMITS, SettingsService
from pomosync.services.timer_service import TimerService


class SettingsDialog:
    """Timer durations, auto-start, theme, notifications and a full reset."""

    def __init__(
        self, master, settings_service: SettingsService, timer_service: TimerService
    ):
        self.settings_service = settings_service
        self.timer_service = timer_service
        s = settings_service.settings

        self.top = tk.Toplevel(master)
        self.top.title("Settings")
        self.top.transient(master)
        self.top.resizable(False, False)

        frame = ttk.Frame(self.top, padding=12)
        frame.pack(fill="both", expand=True)

        timer = ttk.Labelframe(frame, text="Timer Settings", padding=10)
        timer.grid(row=0, column=0, sticky="ew")

        self.vars = {
            "work_duration": tk.IntVar(value=s.timer.work_duration),
            "short_break_duration": tk.IntVar(value=s.timer.short_break_duration),
            "long_break_duration": tk.IntVar(value=s.timer.long_break_duration),
        }
        labels = {
            "work_duration": "Work Duration (minutes)",
            "short_break_duration": "Short Break (minutes)",
            "long_break_duration": "Long Break (minutes)",
        }
        for row, (name, var) in enumerate(self.vars.items()):
            lo, hi = DURATION_LIMITS[name]
            ttk.Label(timer, text=labels[name]).grid(row=row, column=0, sticky="w")
            ttk.Spinbox(timer, from_=lo, to=hi, textvariable=var, width=6).grid(
                row=row, column=1, sticky="w", padx=(8, 0), pady=2
            )

        self.auto_var = tk.BooleanVar(value=s.timer.auto_start_breaks)
        ttk.Checkbutton(
            timer, text="Auto-start breaks", variable=self.auto_var
        ).grid(row=3, column=0, columnspan=2, sticky="w", pady=(6, 0))

        look = ttk.Labelframe(frame, text="Appearance", padding=10)
        look.grid(row=1, column=0, sticky="ew", pady=(10, 0))
        self.theme_var = tk.StringVar(value=s.theme)
        for col, theme in enumerate(("light", "dark", "system")):
            ttk.Radiobutton(
                look, text=theme.title(), value=theme, variable=self.theme_var
            ).grid(row=0, column=col, padx=(0, 8))

        self.notify_var = tk.BooleanVar(value=s.notifications)
        ttk.Checkbutton(
            frame, text="Desktop notifications", variable=self.notify_var
        ).grid(row=2, column=0, sticky="w", pady=(10, 0))

        self.err_var = tk.StringVar(value="")
        ttk.Label(frame, textvariable=self.err_var, foreground="red").grid(
            row=3, column=0, sticky="w", pady=(6, 0)
        )

        btns = ttk.Frame(frame)
        btns.grid(row=4, column=0, sticky="e", pady=(8, 0))
        ttk.Button(btns, text="Cancel", command=self.top.destroy).pack(side="right")
        ttk.Button(btns, text="Save", command=self._save).pack(side="right", padx=(0, 6))
        ttk.Button(btns, text="Reset All Settings", command=self._reset_all).pack(side="left")

    def _save(self):
        try:
            values = {name: var.get() for name, var in self.vars.items()}
        except tk.TclError:
            self.err_var.set("Durations must be whole numbers.")
            return
        try:
            self.settings_service.update_timer_settings(
                auto_start_breaks=self.auto_var.get(), **values
            )
            if self.theme_var.get() != self.settings_service.settings.theme:
                self.settings_service.update_theme(self.theme_var.get())
            if self.notify_var.get() != self.settings_service.settings.notifications:
                self.settings_service.toggle_notifications()
        except ValidationError as e:
            self.err_var.set(str(e))
            return
        self.top.destroy()

    def _reset_all(self):
        if not messagebox.askyesno(
            "Reset settings",
            "Are you sure you want to reset all settings to default?",
            parent=self.top,
        ):
            return
        self.timer_service.reset_all()
        self.top.destroy()
