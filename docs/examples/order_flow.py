"""Order flow: HTTP request → durable orchestration → activities, one trace.

Run with::

    pip install 'baggage-relay[fastapi]' uvicorn
    uvicorn docs.examples.order_flow:app

    curl -X POST localhost:8000/orders \\
        -H 'traceparent: 00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01' \\
        -H 'baggage: tenant-id=acme' \\
        -H 'content-type: application/json' -d '{"sku": "A1", "amount": 5}'

Every log line written by the activities carries the caller's trace id and
tenant, and re-running the same instance (``POST /orders/{id}/replay``)
produces the same span ids.
"""
from typing import Any

from fastapi import Depends, FastAPI

from baggage_relay.adapters.fastapi import TraceContextMiddleware, get_trace_context
from baggage_relay.application.orchestration import DurableOrchestrator, OrchestrationContext
from baggage_relay.config import EnvSettingsLoader, PropagationSettings
from baggage_relay.observability import JsonLoggerFactory, RequestContext, bind_trace_context, get_logger
from baggage_relay.propagation import TraceContext

settings = EnvSettingsLoader().load(PropagationSettings)
JsonLoggerFactory.configure(settings.log_level)
log = get_logger("order_flow", service=settings.service_name)

engine = DurableOrchestrator()


async def reserve_stock(context: TraceContext, sku: str) -> str:
    bind_trace_context(log, context).info("stock.reserved", sku=sku)
    return f"reservation-{sku}"


async def charge_card(context: TraceContext, amount: int) -> str:
    bind_trace_context(log, context).info("card.charged", amount=amount)
    return f"charge-{amount}"


async def place_order(ctx: OrchestrationContext) -> dict[str, Any]:
    reservation = await ctx.call_activity("reserve", ctx.input["sku"])
    charge = await ctx.call_activity("charge", ctx.input["amount"])
    return {"reservation": reservation, "charge": charge, "span_id": ctx.trace_context.span_id}


engine.activity("reserve", reserve_stock)
engine.activity("charge", charge_card)
engine.register("place-order", place_order)

app = FastAPI()
app.add_middleware(TraceContextMiddleware)


@app.post("/orders")
async def create_order(order: dict[str, Any], context: TraceContext = Depends(get_trace_context)) -> dict[str, Any]:
    request = RequestContext.load(context) or RequestContext.new(tenant_id=context.get_baggage("tenant-id"))
    request.store(context)
    instance_id = await engine.schedule("place-order", order, context)
    return {"instance_id": instance_id, **await engine.run(instance_id)}


@app.post("/orders/{instance_id}/replay")
async def replay_order(instance_id: str) -> dict[str, Any]:
    return {"instance_id": instance_id, **await engine.run(instance_id)}
