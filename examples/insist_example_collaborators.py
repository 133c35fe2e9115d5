"""Demonstrates hooks, mocks, spies, the relay, ask channels and snapshots."""

from insist import Ask, Spy, after_all, before_all, before_each, describe, expect, mock, receive, send, test


class Checkout:
    def __init__(self, gateway):
        self.gateway = gateway

    def pay(self, amount: int) -> dict:
        receipt = self.gateway(amount)
        return {"amount": amount, "receipt": receipt, "card": "4111-1111"}


@describe("checkout")
def _():
    gateway = mock("gateway")
    state = {}

    @before_all
    def open_store():
        state["checkout"] = Checkout(gateway)

    @before_each
    def reset_gateway():
        gateway.reset()
        gateway.mock_return_value("r-1")

    @after_all
    def close_store():
        state.clear()

    @test("charges the gateway once")
    def _():
        order = state["checkout"].pay(42)
        expect(gateway).to_have_been_called_times(1)
        expect(gateway).to_have_been_called_with(42)
        send("order", order, exclude=["card"])
        Ask().send(order["receipt"])

    @test("sees the order of the previous test")
    def _():
        expect(receive("order.receipt")).to_be("r-1")
        expect(receive("order")).not_.to_have_property("card")
        expect(Ask.receive().receive()).to_be("r-1")

    @test("renders a stable receipt")
    def _():
        expect(state["checkout"].pay(7)).to_match_snapshot()


@describe("spies")
def _():
    @test("records return values")
    def _():
        spy = Spy(str.upper)
        spy("abc")
        expect(spy).to_have_been_called()
        expect(spy.get_last_return_value()).to_be("ABC")
