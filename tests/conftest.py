"""Pytest configuration and fixtures for scaffold generator tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from capnp_scaffold_generator.schema_model import Field, Message, Method, Schema, Service

BILLING_SCHEMA_SOURCE = """\
@0xdbb9ad1f14bf0b36;

struct CreditCard {
  number @0 :Text;
}

struct Receipt {
  id @0 :UInt64;
}

interface Billing {
  charge @0 CreditCard -> Receipt;
}
"""


class _MemoryStream(io.BytesIO):
    """A stream that hands its content to the sink when it is closed."""

    def __init__(self, sink: MemoryOutputSink, path: str):
        super().__init__()
        self._sink = sink
        self._path = path

    def close(self):
        if not self.closed:
            self._sink.files[self._path] = self.getvalue()
        super().close()


class MemoryOutputSink:
    """Collects artifacts in memory and refuses to open a path twice."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.opened: list[str] = []

    def open(self, path: str) -> io.BytesIO:
        assert path not in self.opened, f"{path} opened twice"
        self.opened.append(path)
        return _MemoryStream(self, path)

    def text(self, path: str) -> str:
        return self.files[path].decode("utf-8")


class FailingOutputSink(MemoryOutputSink):
    """Fails to open every path that ends with the given suffix."""

    def __init__(self, failing_suffix: str):
        super().__init__()
        self.failing_suffix = failing_suffix

    def open(self, path: str) -> io.BytesIO:
        if path.endswith(self.failing_suffix):
            raise PermissionError(f"Permission denied: {path}")
        return super().open(path)


class _FullStream(io.BytesIO):
    def write(self, data):
        raise OSError(28, "No space left on device")


class FullDiskOutputSink(MemoryOutputSink):
    """Opens every path, but writing to a path that ends with the given suffix fails."""

    def __init__(self, failing_suffix: str):
        super().__init__()
        self.failing_suffix = failing_suffix

    def open(self, path: str) -> io.BytesIO:
        if path.endswith(self.failing_suffix):
            self.opened.append(path)
            return _FullStream()
        return super().open(path)


def make_message(name: str, package: str = "org.example") -> Message:
    return Message(name=name, package=package, fields=(Field(name="id", kind="uint64"),))


@pytest.fixture
def memory_sink() -> MemoryOutputSink:
    return MemoryOutputSink()


@pytest.fixture
def billing_source(tmp_path) -> Path:
    """The schema source of the billing schema on disk."""
    path = tmp_path / "billing.capnp"
    path.write_text(BILLING_SCHEMA_SOURCE)
    return path


@pytest.fixture
def billing_schema(billing_source) -> Schema:
    """One service `Billing` with one method `Charge(CreditCard) -> Receipt`."""
    credit_card = make_message("CreditCard")
    receipt = make_message("Receipt")
    return Schema(
        name="billing.capnp",
        source_path=str(billing_source),
        qualified_name="org.example.Billing",
        services=(Service(name="Billing", methods=(Method("Charge", credit_card, receipt),)),),
        messages=(credit_card, receipt),
    )


@pytest.fixture
def orders_schema(tmp_path) -> Schema:
    """Two services over overlapping message types."""
    source = tmp_path / "orders.capnp"
    source.write_text("# orders\n")

    order = make_message("Order")
    receipt = make_message("Receipt")
    order_list = make_message("OrderList")
    orders = Service(
        name="Orders",
        methods=(
            Method("Get", order, receipt),
            Method("List", order, order_list),
        ),
    )
    audit = Service(name="Audit", methods=(Method("Check", order, order),))
    return Schema(
        name="orders.capnp",
        source_path=str(source),
        qualified_name="org.example.shop.Orders",
        services=(orders, audit),
        messages=(order, receipt, order_list),
    )
