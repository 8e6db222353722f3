# -*- coding: utf-8 -*-

import tkinter as tk
import webbrowser
from tkinter import simpledialog, ttk

from pomosync.errors import PomosyncError
from pomosync.services.auth_service import AuthService


class AuthDialog:
    """Login / Sign-up tabs, plus GitHub OAuth through the system browser."""

    def __init__(self, master, auth_service: AuthService):
        self.auth = auth_service

        self.top = tk.Toplevel(master)
        self.top.title("Sign in")
        self.top.transient(master)
        self.top.resizable(False, False)

        tabs = ttk.Notebook(self.top)
        tabs.pack(fill="both", expand=True, padx=10, pady=10)

        login_tab = ttk.Frame(tabs, padding=10)
        signup_tab = ttk.Frame(tabs, padding=10)
        tabs.add(login_tab, text="Login")
        tabs.add(signup_tab, text="Sign up")

        # ---- login ----
        self.li_email = tk.StringVar()
        self.li_pwd = tk.StringVar()
        ttk.Label(login_tab, text="Email").pack(anchor="w")
        ttk.Entry(login_tab, textvariable=self.li_email, width=32).pack(fill="x")
        ttk.Label(login_tab, text="Password").pack(anchor="w", pady=(6, 0))
        ttk.Entry(login_tab, textvariable=self.li_pwd, show="•").pack(fill="x")

        self.login_status = tk.StringVar(value="")
        ttk.Label(login_tab, textvariable=self.login_status, foreground="red").pack(
            anchor="w", pady=(6, 0)
        )
        ttk.Button(login_tab, text="Sign in", command=self._do_login).pack(pady=(6, 0))
        ttk.Button(
            login_tab, text="Continue with GitHub", command=self._do_github
        ).pack(pady=(6, 0))

        # ---- sign up ----
        self.su_email = tk.StringVar()
        self.su_pwd = tk.StringVar()
        self.su_pwd2 = tk.StringVar()
        ttk.Label(signup_tab, text="Email").pack(anchor="w")
        ttk.Entry(signup_tab, textvariable=self.su_email, width=32).pack(fill="x")
        ttk.Label(signup_tab, text="Password").pack(anchor="w", pady=(6, 0))
        ttk.Entry(signup_tab, textvariable=self.su_pwd, show="•").pack(fill="x")
        ttk.Label(signup_tab, text="Confirm password").pack(anchor="w", pady=(6, 0))
        ttk.Entry(signup_tab, textvariable=self.su_pwd2, show="•").pack(fill="x")

        self.signup_status = tk.StringVar(value="")
        ttk.Label(signup_tab, textvariable=self.signup_status, wraplength=260).pack(
            anchor="w", pady=(6, 0)
        )
        ttk.Button(signup_tab, text="Create account", command=self._do_signup).pack(
            pady=(6, 0)
        )

    def _do_login(self):
        try:
            self.auth.sign_in(self.li_email.get(), self.li_pwd.get())
        except PomosyncError as e:
            self.login_status.set(e.message)
            return
        self.top.destroy()

    def _do_signup(self):
        try:
            signed_in = self.auth.sign_up(
                self.su_email.get(), self.su_pwd.get(), self.su_pwd2.get()
            )
        except PomosyncError as e:
            self.signup_status.set(e.message)
            return
        if signed_in:
            self.top.destroy()
        else:
            self.signup_status.set("Check your email for a confirmation link!")

    def _do_github(self):
        try:
            url = self.auth.sign_in_with_github()
        except PomosyncError as e:
            self.login_status.set(e.message)
            return
        webbrowser.open(url)
        callback = simpledialog.askstring(
            "GitHub sign in",
            "Finish signing in in your browser, then paste the address\n"
            "of the page it sends you back to:",
            parent=self.top,
        )
        if not callback:
            return
        try:
            self.auth.complete_sign_in(callback)
        except PomosyncError as e:
            self.login_status.set(e.message)
            return
        self.top.destroy()
