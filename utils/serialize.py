def _money(value):
    return float(value) if value is not None else None


def booking_json(b) -> dict:
    return {
        "id": b.id,
        "customer_name": b.customer_name,
        "phone_number": b.phone_number,
        "booking_time": b.booking_time.isoformat(),
        "end_time": b.end_time.isoformat(),
        "duration_hours": b.duration_hours,
        "total_amount": _money(b.total_amount),
        "payment_status": b.payment_status,
        "booking_status": b.booking_status,
        "created_by": b.created_by,
        "created_at": b.created_at.isoformat() if b.created_at else None,
    }


def payment_json(p) -> dict:
    return {
        "id": p.id,
        "booking_id": p.booking_id,
        "amount_paid": _money(p.amount_paid),
        "payment_method": p.payment_method,
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }


def flow_json(flow, upi_id=None, payee_name="", currency="INR") -> dict:
    out = {
        "booking_id": flow.booking_id,
        "amount": _money(flow.amount),
        "entry": flow.entry.value,
        "state": flow.state.value,
        "method": flow.method,
    }
    if flow.method == "upi" and flow.state.value == "verify":
        out["upi_configured"] = flow.upi_configured(upi_id)
        out["payment_request"] = flow.payment_request(upi_id, payee_name, currency)
    return out
