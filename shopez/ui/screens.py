# shopez/ui/screens.py

"""Screens for the ShopEZ terminal UI.

Screens only render state and forward intents; catalog filtering and
cart rules live in the services they call.
"""

import logging
from typing import TYPE_CHECKING, Literal, cast

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Input, Static

from shopez.config.settings import Settings
from shopez.errors import NetworkError, ShopError
from shopez.models.cart import CartLine
from shopez.models.product import Product
from shopez.services.cart_sync import CartView
from shopez.services.catalog_browser import CatalogBrowser
from shopez.storage.cart_stream import CartSubscription

if TYPE_CHECKING:
    from shopez.ui.app import ShopApp

logger = logging.getLogger("shopez.ui")


def format_price(amount: float) -> str:
    """Render an amount as ``R19.99``."""
    return f"{Settings.CURRENCY_SYMBOL}{amount:.2f}"


def preview_title(title: str, length: int = Settings.TITLE_PREVIEW_LENGTH) -> str:
    """Shorten long catalog titles for list rows."""
    return title if len(title) <= length else title[:length] + "..."


class ShopScreen(Screen[None]):
    """Common helpers for screens that talk to the app's services."""

    @property
    def shop(self) -> "ShopApp":
        return cast("ShopApp", self.app)

    def report(self, exc: ShopError) -> None:
        """Show a failure as a one-shot notification."""
        self.app.notify(exc.message, title=exc.title, severity="error")


# ── Authentication ───────────────────────────────────────


class CredentialsScreen(ShopScreen):
    """Email and password form shared by login and registration.

    Subclasses only configure the labels, the ``SessionProvider`` method
    the form submits to (``ACTION``) and the form it links to
    (``SWITCH_TO``, a key of :data:`CREDENTIAL_SCREENS`).
    """

    HEADING = "Welcome Back"
    SUBTITLE = "Login to continue"
    SUBMIT_LABEL = "Login"
    SWITCH_LABEL = "Don't have an account? Sign Up"
    ACTION: Literal["sign_in", "register"] = "sign_in"
    SWITCH_TO = "register"

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static(self.HEADING, classes="heading"),
            Static(self.SUBTITLE, classes="subtitle"),
            Input(placeholder="Email", id="email"),
            Input(placeholder="Password", password=True, id="password"),
            Button(self.SUBMIT_LABEL, variant="primary", id="submit"),
            Button(self.SWITCH_LABEL, id="switch"),
            id="credentials",
        )
        yield Footer()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "submit":
            self.run_worker(self._submit(), exclusive=True)
        elif event.button.id == "switch":
            self._switch()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "password":
            self.run_worker(self._submit(), exclusive=True)

    def _credentials(self) -> tuple[str, str]:
        email = self.query_one("#email", Input).value
        password = self.query_one("#password", Input).value
        return email, password

    async def _submit(self) -> None:
        email, password = self._credentials()
        sessions = self.shop.sessions
        submit = (
            sessions.register if self.ACTION == "register" else sessions.sign_in
        )
        try:
            await submit(email, password)
        except ShopError as exc:
            self.report(exc)

    def _switch(self) -> None:
        self.app.switch_screen(CREDENTIAL_SCREENS[self.SWITCH_TO]())


class LoginScreen(CredentialsScreen):
    """Sign in with an existing account."""


class RegisterScreen(CredentialsScreen):
    """Create a new account."""

    HEADING = "Create Account"
    SUBTITLE = "Join us and start shopping"
    SUBMIT_LABEL = "Register"
    SWITCH_LABEL = "Already have an account? Sign in"
    ACTION = "register"
    SWITCH_TO = "login"


CREDENTIAL_SCREENS: dict[str, type[CredentialsScreen]] = {
    "login": LoginScreen,
    "register": RegisterScreen,
}


# ── Catalog ──────────────────────────────────────────────


class HomeScreen(ShopScreen):
    """Category bar and product list."""

    BINDINGS = [
        Binding("c", "open_cart", "Cart"),
        Binding("l", "logout", "Log out"),
        Binding("r", "retry", "Retry"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.browser: CatalogBrowser | None = None
        self._category_ids: dict[str, str] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(id="categories")
        yield Static("Loading products...", id="status")
        yield Button("Try Again", id="retry_btn")
        yield DataTable(id="products", zebra_stripes=True, cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        self.browser = CatalogBrowser(self.shop.catalog_client)
        table = cast(
            DataTable[str | Text], self.query_one("#products", DataTable)
        )
        table.add_columns("Title", "Price", "Category")
        self.query_one("#retry_btn", Button).display = False
        self.run_worker(self._load(), exclusive=True)

    async def _load(self) -> None:
        assert self.browser is not None
        status = self.query_one("#status", Static)
        status.update("Loading products...")
        state = await self.browser.load()

        retry_btn = self.query_one("#retry_btn", Button)
        if state.error:
            status.update(state.error)
            retry_btn.display = True
            self.populate_table([])
            return
        retry_btn.display = False
        await self._render_categories(state.categories, state.selection)
        self.populate_table(state.products)

    async def _render_categories(
        self, categories: list[str], selection: str
    ) -> None:
        bar = self.query_one("#categories", Horizontal)
        await bar.remove_children()
        self._category_ids = {
            f"cat_{i}": category for i, category in enumerate(categories)
        }
        await bar.mount_all(
            Button(
                category.upper(),
                id=button_id,
                classes="category",
                variant="primary" if category == selection else "default",
            )
            for button_id, category in self._category_ids.items()
        )

    def populate_table(self, products: list[Product]) -> None:
        table = cast(
            DataTable[str | Text], self.query_one("#products", DataTable)
        )
        table.clear()
        for p in products:
            table.add_row(
                preview_title(p.title),
                Text(format_price(p.price), style="bold green"),
                p.category,
                key=str(p.id),
            )
        if products:
            self.query_one("#status", Static).update(
                f"{len(products)} products"
            )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "retry_btn":
            self.action_retry()
            return
        category = self._category_ids.get(button_id)
        if category is None or self.browser is None:
            return
        products = self.browser.select(category)
        for other in self.query(".category").results(Button):
            other.variant = "primary" if other.id == button_id else "default"
        self.populate_table(products)
        if not products:
            self.query_one("#status", Static).update(
                "No products in this category"
            )

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.row_key.value is None:
            return
        self.app.push_screen(DetailScreen(int(event.row_key.value)))

    def action_open_cart(self) -> None:
        self.app.push_screen(CartScreen())

    def action_logout(self) -> None:
        self.shop.sessions.sign_out()

    def action_retry(self) -> None:
        self.run_worker(self._load(), exclusive=True)


class DetailScreen(ShopScreen):
    """One product with an add-to-cart action."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("c", "open_cart", "Cart"),
        Binding("a", "add_to_cart", "Add to Cart"),
    ]

    def __init__(self, product_id: int) -> None:
        super().__init__()
        self.product_id = product_id
        self.product: Product | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(
            Static("Loading product details...", id="detail"),
            Horizontal(
                Button("Add to Cart", variant="primary", id="add_btn"),
                Button("Back", id="back_btn"),
            ),
            id="detail_card",
        )
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#add_btn", Button).disabled = True
        self.run_worker(self._load(), exclusive=True)

    async def _load(self) -> None:
        browser = CatalogBrowser(self.shop.catalog_client)
        try:
            self.product = await browser.load_product(self.product_id)
        except NetworkError as exc:
            logger.error("Detail load failed for %d: %s", self.product_id, exc)
            self.product = None

        detail = self.query_one("#detail", Static)
        if self.product is None:
            detail.update("Product not found.")
            return
        detail.update(self._describe(self.product))
        self.query_one("#add_btn", Button).disabled = False

    @staticmethod
    def _describe(product: Product) -> Text:
        text = Text()
        text.append(f"{product.category}\n", style="dim")
        text.append(f"{product.title}\n\n", style="bold")
        text.append(format_price(product.price), style="bold green")
        if product.rating is not None:
            text.append(
                f"   ★ {product.rating.rate} ({product.rating.count} reviews)"
            )
        else:
            text.append("   ★ — (0 reviews)")
        text.append("\n\nDescription\n", style="bold")
        text.append(product.description)
        return text

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add_btn":
            self.action_add_to_cart()
        elif event.button.id == "back_btn":
            self.action_back()

    def action_add_to_cart(self) -> None:
        if self.product is None:
            return
        self.run_worker(self._add(self.product), group="cart")

    async def _add(self, product: Product) -> None:
        try:
            session = await self.shop.sessions.fresh_session()
            await self.shop.cart.add_to_cart(session, product)
        except ShopError as exc:
            self.report(exc)
            return
        self.app.notify(
            f"{product.title} has been added to your cart.",
            title="Added to Cart",
        )

    def action_open_cart(self) -> None:
        self.app.push_screen(CartScreen())

    def action_back(self) -> None:
        self.app.pop_screen()


# ── Cart ─────────────────────────────────────────────────


class ConfirmScreen(ModalScreen[bool]):
    """Cancellable yes/no prompt."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, title: str, message: str, confirm_label: str) -> None:
        super().__init__()
        self.prompt_title = title
        self.message = message
        self.confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(self.prompt_title, classes="heading"),
            Static(self.message),
            Horizontal(
                Button("Cancel", id="cancel"),
                Button(self.confirm_label, variant="error", id="confirm"),
            ),
            id="confirm_dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")

    def action_cancel(self) -> None:
        self.dismiss(False)


class CartScreen(ShopScreen):
    """Live view of the signed-in user's cart."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("plus,equals_sign", "increase", "+1"),
        Binding("minus", "decrease", "-1"),
        Binding("delete,x", "remove", "Remove"),
        Binding("k", "checkout", "Checkout"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.cart_view = CartView(lines=[], total=0.0)
        self._subscription: CartSubscription | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("Your Cart", classes="heading")
        yield DataTable(id="cart_lines", zebra_stripes=True, cursor_type="row")
        yield Static("Your cart is empty.", id="total")
        yield Button("Checkout", variant="primary", id="checkout_btn")
        yield Footer()

    def on_mount(self) -> None:
        table = cast(
            DataTable[str | Text], self.query_one("#cart_lines", DataTable)
        )
        table.add_columns("Title", "Price", "Qty", "Subtotal")
        self.run_worker(self._watch(), exclusive=True, group="cart_stream")

    def on_unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    async def _watch(self) -> None:
        try:
            session = await self.shop.sessions.fresh_session()
            self._subscription = self.shop.cart.subscribe(session)
            async for view in self.shop.cart.watch(self._subscription):
                self.render_view(view)
        except ShopError as exc:
            self.report(exc)

    def render_view(self, view: CartView) -> None:
        self.cart_view = view
        table = cast(
            DataTable[str | Text], self.query_one("#cart_lines", DataTable)
        )
        table.clear()
        for line in view.lines:
            table.add_row(
                line.title[:60],
                format_price(line.price),
                str(line.quantity),
                format_price(line.subtotal),
                key=str(line.id),
            )
        total = self.query_one("#total", Static)
        checkout = self.query_one("#checkout_btn", Button)
        if view.is_empty:
            total.update("Your cart is empty.")
            checkout.display = False
        else:
            total.update(f"Total: {format_price(view.total)}")
            checkout.display = True

    def _selected_line(self) -> CartLine | None:
        table = self.query_one("#cart_lines", DataTable)
        row = table.cursor_row
        if 0 <= row < len(self.cart_view.lines):
            return self.cart_view.lines[row]
        return None

    async def _change(self, line: CartLine, change: int) -> None:
        try:
            session = await self.shop.sessions.fresh_session()
            await self.shop.cart.change_quantity(session, line, change)
        except ShopError as exc:
            self.report(exc)

    async def _remove(self, line: CartLine) -> None:
        try:
            session = await self.shop.sessions.fresh_session()
            await self.shop.cart.remove(session, line, self._confirm_removal)
        except ShopError as exc:
            self.report(exc)

    async def _confirm_removal(self, line: CartLine) -> bool:
        confirmed = await self.app.push_screen_wait(
            ConfirmScreen("Remove Item", f"Remove {line.title}?", "Remove")
        )
        return bool(confirmed)

    def action_increase(self) -> None:
        line = self._selected_line()
        if line is not None:
            self.run_worker(self._change(line, 1), group="cart")

    def action_decrease(self) -> None:
        line = self._selected_line()
        if line is not None:
            self.run_worker(self._change(line, -1), group="cart")

    def action_remove(self) -> None:
        line = self._selected_line()
        if line is not None:
            self.run_worker(self._remove(line), group="cart")

    def action_checkout(self) -> None:
        if self.cart_view.is_empty:
            return
        self.app.notify("Proceeding to checkout...", title="Checkout")

    def action_back(self) -> None:
        self.app.pop_screen()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "checkout_btn":
            self.action_checkout()
