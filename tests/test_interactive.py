"""Menu dispatch and the per-action error guard."""
from unittest.mock import patch, MagicMock

import psycopg2
import pytest

from realty import interactive
from realty.errors import DeleteBlocked, NotFound
from realty.utils import FormCancelled


def failing(exc):
    handler = MagicMock(side_effect=exc)
    handler.__name__ = 'failing_handler'
    return handler


def test_run_handler_success():
    handler = MagicMock()
    assert interactive.run_handler(handler) is True
    handler.assert_called_once_with()


@pytest.mark.parametrize("exc", [
    FormCancelled(),
    NotFound("Owner 9 not found"),
    DeleteBlocked('property', 1, {"open maintenance request(s)": 2}),
    psycopg2.OperationalError("server closed the connection unexpectedly"),
    RuntimeError("boom"),
])
def test_run_handler_reports_and_continues(exc):
    assert interactive.run_handler(failing(exc)) is False


def test_run_handler_lets_keyboard_interrupt_through():
    with pytest.raises(KeyboardInterrupt):
        interactive.run_handler(failing(KeyboardInterrupt()))


@pytest.mark.parametrize("menu", [
    interactive.OWNER_MENU, interactive.PROPERTY_MENU, interactive.OWNERSHIP_MENU,
    interactive.TENANT_MENU, interactive.LEASE_MENU, interactive.PAYMENT_MENU,
    interactive.MAINTENANCE_MENU, interactive.ANALYTICS_MENU,
])
def test_menus_map_numbered_keys_to_handlers(menu):
    assert list(menu) == [str(n) for n in range(1, len(menu) + 1)]
    for label, handler in menu.values():
        assert label and callable(handler)


def test_analytics_menu_has_all_reports():
    assert len(interactive.ANALYTICS_MENU) == 5


def test_submenu_dispatches_by_key():
    handler = MagicMock()
    options = {'1': ("Do it", handler)}
    keys = iter(['1', 'x', 'b'])
    with patch.object(interactive.Prompt, 'ask', side_effect=lambda *a, **k: next(keys)), \
            patch.object(interactive, 'clear_screen'), \
            patch.object(interactive, 'pause'):
        assert interactive.handle_submenu("Test", options) == interactive.BACK
    handler.assert_called_once_with()


def test_submenu_quit():
    with patch.object(interactive.Prompt, 'ask', return_value='q'), \
            patch.object(interactive, 'clear_screen'):
        assert interactive.handle_submenu("Test", {}) == interactive.QUIT


def test_main_menu_quits_after_confirmation():
    keys = iter(['9', 'q'])
    with patch.object(interactive.Prompt, 'ask', side_effect=lambda *a, **k: next(keys)), \
            patch.object(interactive, 'confirm_quit', return_value=True), \
            patch.object(interactive, 'clear_screen'), \
            patch.object(interactive, 'pause') as pause:
        interactive.run_interactive_menu()
    pause.assert_called_once()
