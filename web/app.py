"""Flask JSON API for service records and maintenance predictions."""

import asyncio
from typing import Optional

from flask import Flask, jsonify, request

from servicetrack import (
    ChangeBroadcaster,
    EntityCache,
    ErrorCode,
    PersistenceGateway,
    RecordFilter,
    Result,
    ServiceRecordInput,
    SortSpec,
    YamlFileGateway,
)
from servicetrack.config import Settings

HTTP_STATUS = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.NETWORK_ERROR: 503,
    ErrorCode.SERVER_ERROR: 500,
}

INPUT_FIELDS = {
    "customerId": "customer_id",
    "serviceDate": "service_date",
    "serviceType": "service_type",
    "serviceDescription": "service_description",
    "amount": "amount",
    "status": "status",
    "photoPath": "photo_path",
}


def parse_id(value: str):
    """Ids are integers when they look like one."""
    return int(value) if value.isdigit() else value


def parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def filter_from_args(args) -> RecordFilter:
    """Build a RecordFilter from query string arguments."""
    customer_id = args.get("customer_id")
    return RecordFilter(
        customer_id=parse_id(customer_id) if customer_id else None,
        service_type=args.get("service_type") or None,
        date_from=args.get("date_from") or None,
        date_to=args.get("date_to") or None,
        min_amount=parse_float(args.get("min_amount")),
        max_amount=parse_float(args.get("max_amount")),
        status=args.get("status") or None,
    )


def input_from_json(body: dict) -> ServiceRecordInput:
    return ServiceRecordInput(
        **{name: body.get(key) for key, name in INPUT_FIELDS.items()}
    )


def error_response(result: Result):
    payload = {
        "success": False,
        "error": result.error.message,
        "code": result.error.code.value,
        "details": result.error.details,
    }
    return jsonify(payload), HTTP_STATUS.get(result.error.code, 500)


def create_app(
    gateway: Optional[PersistenceGateway] = None, settings: Optional[Settings] = None
) -> Flask:
    """
    Build the app. One gateway and one broadcaster are shared by every
    request; each request works through its own short-lived cache.
    """
    settings = settings or Settings()
    app = Flask(__name__)
    app.config["GATEWAY"] = gateway or YamlFileGateway(settings.data_file)
    app.config["BROADCASTER"] = ChangeBroadcaster()
    app.config["CYCLES"] = settings.cycle_table()

    def run(operation):
        async def runner():
            with EntityCache(
                app.config["GATEWAY"], app.config["BROADCASTER"], name="web"
            ) as cache:
                return await operation(cache)

        return asyncio.run(runner())

    @app.route("/api/records", methods=["GET"])
    def list_records():
        """Records after filters and sort from the query string."""
        try:
            criteria = filter_from_args(request.args)
            sort = SortSpec(
                request.args.get("sort", "service_date"),
                request.args.get("direction", "desc"),
            )
        except ValueError as e:
            return jsonify({"success": False, "error": str(e), "code": "VALIDATION_ERROR"}), 400

        async def operation(cache):
            result = await cache.fetch(silent=True)
            cache.filters = criteria
            cache.set_sort(sort)
            return result, cache.visible

        result, records = run(operation)
        if not result.success:
            return error_response(result)
        return jsonify({"success": True, "data": [r.to_dict() for r in records]})

    @app.route("/api/records", methods=["POST"])
    def create_record():
        data = input_from_json(request.get_json(silent=True) or {})
        result = run(lambda cache: cache.create(data))
        if not result.success:
            return error_response(result)
        return jsonify({"success": True, "data": result.data.to_dict()}), 201

    @app.route("/api/records/<record_id>", methods=["PUT"])
    def update_record(record_id: str):
        data = input_from_json(request.get_json(silent=True) or {})
        result = run(lambda cache: cache.update(parse_id(record_id), data))
        if not result.success:
            return error_response(result)
        return jsonify({"success": True, "data": result.data.to_dict()})

    @app.route("/api/records/<record_id>", methods=["DELETE"])
    def delete_record(record_id: str):
        result = run(lambda cache: cache.delete(parse_id(record_id)))
        if not result.success:
            return error_response(result)
        return jsonify({"success": True})

    @app.route("/api/maintenance", methods=["GET"])
    def maintenance():
        """Ranked predictions; ?due=true keeps only due items, ?category= narrows."""
        customer_id = request.args.get("customer_id")
        due_only = request.args.get("due", "").lower() == "true"
        categories = request.args.getlist("category") or None

        async def operation(cache):
            scope = RecordFilter(customer_id=parse_id(customer_id)) if customer_id else None
            result = await cache.fetch(scope, silent=True)
            if due_only or categories:
                statuses = cache.due_maintenance(app.config["CYCLES"], categories)
            else:
                statuses = cache.maintenance(app.config["CYCLES"])
            return result, statuses

        result, statuses = run(operation)
        if not result.success:
            return error_response(result)
        return jsonify({"success": True, "data": [s.to_dict() for s in statuses]})

    return app


if __name__ == "__main__":
    from servicetrack.config import configure_logging

    settings = Settings()
    configure_logging(settings.log_level)
    create_app(settings=settings).run(debug=True, host="0.0.0.0", port=5001)
