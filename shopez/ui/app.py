# shopez/ui/app.py

"""Terminal UI for the ShopEZ storefront."""

import logging
from collections.abc import Callable

from textual.app import App
from textual.binding import Binding

from shopez.clients.catalog_client import CatalogClient
from shopez.models.session import Session
from shopez.services.cart_sync import CartService
from shopez.services.session_provider import SessionProvider
from shopez.ui.screens import HomeScreen, LoginScreen

logger = logging.getLogger("shopez.ui")


class ShopApp(App[None]):
    """Storefront app; the signed-in identity decides which screens exist."""

    TITLE = "ShopEZ"

    CSS = """
    #credentials, #detail_card, #confirm_dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        border: round $primary;
    }
    Screen { align: center top; }
    ConfirmScreen { align: center middle; }
    .heading { text-style: bold; padding-bottom: 1; }
    .subtitle { color: $text-muted; padding-bottom: 1; }
    #categories { height: auto; }
    .category { margin-right: 1; }
    #status, #total { padding: 0 1; }
    #total { text-style: bold; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        sessions: SessionProvider | None = None,
        catalog_client: CatalogClient | None = None,
        cart: CartService | None = None,
    ) -> None:
        super().__init__()
        self.sessions = sessions or SessionProvider()
        self.catalog_client = catalog_client or CatalogClient()
        self.cart = cart or CartService()
        self._unsubscribe: Callable[[], None] | None = None

    def on_mount(self) -> None:
        self._unsubscribe = self.sessions.subscribe(self._on_identity_changed)

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_identity_changed(self, session: Session | None) -> None:
        """Replace the whole screen stack with the signed-in/out subtree."""
        while len(self.screen_stack) > 1:
            self.pop_screen()
        if session is None:
            self.push_screen(LoginScreen())
        else:
            self.push_screen(HomeScreen())
