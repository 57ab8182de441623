class BusyMixin:
    """
    Mixin that manages the BusyOverlay attached to the main window.

    Expects:
        self.busy   # BusyOverlay instance
        self.rect() # from QMainWindow
    """

    def _set_busy(self, on: bool, text: str = "Working…", done: int = 0, total: int = 0) -> None:
        if getattr(self, "busy", None) is None:
            return

        self.busy.set_text(text)
        self.busy.setGeometry(self.rect())
        if on:
            self.busy.set_progress(done, total)
            if not self.busy.isVisible():
                self.busy.fade_in()
        else:
            self.busy.fade_out()
