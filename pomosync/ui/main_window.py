# -*- coding: utf-8 -*-

import os
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Dict, Optional

from tkinterweb import HtmlFrame

from pomosync.context import AppContext
from pomosync.core.clock import format_duration
from pomosync.domain.models import Task
from pomosync.errors import PomosyncError
from pomosync.ui.auth_dialog import AuthDialog
from pomosync.ui.markdown_renderer import MarkdownRenderer, theme_for
from pomosync.ui.pomodoro_widget import PomodoroWidget
from pomosync.ui.settings_dialog import SettingsDialog

PALETTES = {
    "light": {"bg": "#F4F6FA", "fg": "#111827", "field": "#FFFFFF"},
    "dark": {"bg": "#111827", "fg": "#F3F4F6", "field": "#1F2937"},
}


def _system_prefers_dark() -> bool:
    return os.environ.get("GTK_THEME", "").lower().endswith(":dark")


class MainWindow:
    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        self.task_service = ctx.task_service
        self.timer_service = ctx.timer_service
        self.stats_service = ctx.stats_service
        self.settings_service = ctx.settings_service

        self.root = tk.Tk()
        self.root.title("Pomodoro Timer")
        self.root.geometry("940x520")
        self.ctx.timer_service.notifier.set_bell(self.root.bell)

        self.active_task_id: Optional[str] = self.timer_service.active_task_id
        self._list_index_to_task_id: Dict[int, str] = {}
        self._md = MarkdownRenderer()

        self._build_menu()
        self._build_ui()

        self.settings_service.add_listener(lambda _s: self._apply_theme())
        if self.ctx.auth_service is not None:
            self.ctx.auth_service.add_listener(lambda _u: self._on_auth_changed())

        self._apply_theme()
        self._on_auth_changed()

    # ----- layout -----
    def _build_menu(self):
        menubar = tk.Menu(self.root)
        app_menu = tk.Menu(menubar, tearoff=0)
        app_menu.add_command(label="Settings…", command=self._open_settings)
        app_menu.add_command(label="Diagnostics", command=self._run_diagnostics)
        app_menu.add_separator()
        app_menu.add_command(label="Quit", command=self.root.destroy)
        menubar.add_cascade(label="App", menu=app_menu)

        self.account_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Account", menu=self.account_menu)
        self.root.config(menu=menubar)

    def _build_ui(self):
        outer = ttk.Frame(self.root, padding=10)
        outer.pack(fill="both", expand=True)

        outer.columnconfigure(0, weight=1)
        outer.columnconfigure(1, weight=1)
        outer.rowconfigure(0, weight=1)

        # LEFT: Tasks panel
        left = ttk.Labelframe(outer, text="Tasks", padding=10)
        left.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        left.columnconfigure(0, weight=1)
        left.rowconfigure(3, weight=1)
        left.rowconfigure(6, weight=1)

        add_row = ttk.Frame(left)
        add_row.grid(row=0, column=0, sticky="ew")
        add_row.columnconfigure(0, weight=1)

        self.title_var = tk.StringVar()
        ttk.Entry(add_row, textvariable=self.title_var).grid(row=0, column=0, sticky="ew")
        ttk.Button(add_row, text="Add", command=self._add_task).grid(
            row=0, column=1, padx=(6, 0)
        )
        ttk.Button(add_row, text="Save", command=self._save_task).grid(
            row=0, column=2, padx=(6, 0)
        )

        self.desc_text = tk.Text(left, height=4, wrap="word")
        self.desc_text.grid(row=1, column=0, sticky="ew", pady=(6, 0))

        self.err_var = tk.StringVar(value="")
        ttk.Label(left, textvariable=self.err_var, foreground="red").grid(
            row=2, column=0, sticky="w", pady=(4, 4)
        )

        self.task_list = tk.Listbox(left, height=10, exportselection=False)
        self.task_list.grid(row=3, column=0, sticky="nsew")
        self.task_list.bind("<<ListboxSelect>>", self._on_select_task)

        actions = ttk.Frame(left)
        actions.grid(row=4, column=0, sticky="ew", pady=(8, 0))
        ttk.Button(actions, text="Toggle Done", command=self._toggle_done).pack(side="left")
        ttk.Button(actions, text="Delete", command=self._delete_task).pack(
            side="left", padx=(6, 0)
        )
        ttk.Button(actions, text="Refresh", command=self._refresh_all).pack(side="right")

        ttk.Label(left, text="Description").grid(row=5, column=0, sticky="w", pady=(8, 2))
        self.md_view = HtmlFrame(left, horizontal_scrollbar="auto")
        self.md_view.grid(row=6, column=0, sticky="nsew")

        # RIGHT: Pomodoro + Stats
        right = ttk.Frame(outer)
        right.grid(row=0, column=1, sticky="nsew")
        right.columnconfigure(0, weight=1)
        right.rowconfigure(1, weight=1)

        self.pomodoro = PomodoroWidget(
            right,
            timer_service=self.timer_service,
            settings_service=self.settings_service,
            on_request_refresh=self._refresh_stats_only,
        )
        self.pomodoro.grid(row=0, column=0, sticky="ew")

        stats = ttk.Labelframe(right, text="Stats", padding=10)
        stats.grid(row=1, column=0, sticky="nsew", pady=(10, 0))
        stats.columnconfigure(0, weight=1)

        self.stats_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.stats_var, font=("Sans", 11)).grid(
            row=0, column=0, sticky="w"
        )
        self.active_var = tk.StringVar(value="Active task: (none)")
        ttk.Label(stats, textvariable=self.active_var).grid(
            row=1, column=0, sticky="w", pady=(8, 0)
        )
        self.account_var = tk.StringVar(value="")
        ttk.Label(stats, textvariable=self.account_var).grid(
            row=2, column=0, sticky="w", pady=(8, 0)
        )

    def run(self):
        self.root.mainloop()

    # ----- theme -----
    def _apply_theme(self):
        mode = self.settings_service.resolve_theme(_system_prefers_dark())
        pal = PALETTES[mode]
        style = ttk.Style(self.root)
        style.theme_use("clam")
        for widget in ("TFrame", "TLabel", "TLabelframe", "TLabelframe.Label", "TCheckbutton", "TRadiobutton"):
            style.configure(widget, background=pal["bg"], foreground=pal["fg"])
        self.root.configure(bg=pal["bg"])
        self.task_list.configure(bg=pal["field"], fg=pal["fg"])
        self.desc_text.configure(bg=pal["field"], fg=pal["fg"], insertbackground=pal["fg"])
        self._md = MarkdownRenderer(theme_for(mode))
        self._render_description()

    # ----- account -----
    def _current_user_id(self) -> Optional[str]:
        return self.ctx.user_id

    def _on_auth_changed(self):
        self.account_menu.delete(0, tk.END)
        auth = self.ctx.auth_service
        if auth is None:
            self.account_menu.add_command(label="Cloud sync not configured", state="disabled")
            self.account_var.set("Local only")
        elif auth.is_authenticated():
            self.account_menu.add_command(label="Sign out", command=self._sign_out)
            self.account_var.set(f"Signed in: {auth.current_user.email}")
        else:
            self.account_menu.add_command(label="Sign in…", command=self._open_auth)
            self.account_var.set("Not signed in (tasks stay on this computer)")
        self._refresh_all()

    def _open_auth(self):
        AuthDialog(self.root, self.ctx.auth_service)

    def _sign_out(self):
        try:
            self.ctx.auth_service.sign_out()
        except Exception as e:
            messagebox.showerror("Sign out", str(e), parent=self.root)

    def _open_settings(self):
        SettingsDialog(self.root, self.settings_service, self.timer_service)

    def _run_diagnostics(self):
        results = self.ctx.diagnostics.run_all()
        lines = [f"{'OK ' if r.ok else 'ERR'}  {r.name}: {r.message}" for r in results]
        messagebox.showinfo("Diagnostics", "\n".join(lines), parent=self.root)

    # ----- Active task helpers -----
    def _selected_task(self) -> Optional[Task]:
        if not self.active_task_id:
            return None
        try:
            return self.task_service.get_task(self.active_task_id)
        except PomosyncError:
            return None

    def _on_select_task(self, event=None):
        sel = self.task_list.curselection()
        if not sel:
            self.active_task_id = None
        else:
            self.active_task_id = self._list_index_to_task_id.get(int(sel[0]))

        task = self._selected_task()
        self.title_var.set(task.title if task else "")
        self.desc_text.delete("1.0", tk.END)
        if task and task.description:
            self.desc_text.insert("1.0", task.description)

        self.timer_service.set_active_task(self.active_task_id)
        self._render_description()
        self._refresh_stats_only()

    # ----- UI actions -----
    def _run(self, fn, *args, **kwargs):
        try:
            result = fn(*args, **kwargs)
        except PomosyncError as e:
            self.err_var.set(e.message)
            return None
        self.err_var.set("")
        return result

    def _add_task(self):
        task = self._run(
            self.task_service.create_task,
            self.title_var.get(),
            self._current_user_id(),
            description=self.desc_text.get("1.0", "end-1c"),
        )
        if task is None:
            return
        self.title_var.set("")
        self.desc_text.delete("1.0", tk.END)
        self.active_task_id = task.id
        self._refresh_all()

    def _save_task(self):
        if not self.active_task_id:
            return
        self._run(
            self.task_service.update_task,
            self.active_task_id,
            title=self.title_var.get(),
            description=self.desc_text.get("1.0", "end-1c"),
        )
        self._refresh_all()

    def _toggle_done(self):
        if not self.active_task_id:
            return
        task = self._run(self.task_service.toggle_task_status, self.active_task_id)
        if task is not None and task.status == "done":
            self.timer_service.mark_task_done(task.id)
        self._refresh_all()

    def _delete_task(self):
        if not self.active_task_id:
            return
        if not messagebox.askyesno("Delete task", "Delete the selected task?", parent=self.root):
            return
        task_id = self.active_task_id
        self._run(self.task_service.delete_task, task_id)
        self.timer_service.mark_task_done(task_id)
        self.active_task_id = None
        self._refresh_all()

    # ----- Refresh -----
    def _refresh_all(self):
        self._refresh_tasks_only()
        self._render_description()
        self._refresh_stats_only()

    def _refresh_tasks_only(self):
        tasks = self._run(self.task_service.get_tasks, self._current_user_id()) or []

        prev_active = self.active_task_id

        self.task_list.delete(0, tk.END)
        self._list_index_to_task_id.clear()

        selected_index = None
        for i, t in enumerate(tasks):
            mark = "☑" if t.status == "done" else "☐"
            self.task_list.insert(tk.END, f"{mark} {t.title}")
            self._list_index_to_task_id[i] = t.id
            if prev_active and t.id == prev_active:
                selected_index = i

        if selected_index is not None:
            self.task_list.selection_set(selected_index)
            self.task_list.activate(selected_index)
        else:
            self.active_task_id = None

        self.timer_service.set_active_task(self.active_task_id)

    def _render_description(self):
        task = self._selected_task()
        html = self._md.to_html(task.description if task else "")
        self.md_view.load_html(html)

    def _refresh_stats_only(self):
        today = self.stats_service.total_today_work_sec()
        count = self.stats_service.completed_work_sessions_today()
        task = self._selected_task()
        if task:
            active_total = self.stats_service.total_task_work_sec(task.id)
            self.active_var.set(f"Active task: {task.title}")
            self.stats_var.set(
                f"Today (work): {format_duration(today)} in {count} session(s)\n"
                f"Selected task total (work): {format_duration(active_total)}"
            )
        else:
            self.active_var.set("Active task: (none)")
            self.stats_var.set(
                f"Today (work): {format_duration(today)} in {count} session(s)\n"
                "Selected task total (work): -"
            )
