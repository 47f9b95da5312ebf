"""
Ranking API endpoints
"""
from flask import Blueprint, current_app, request, jsonify
import logging

from toptalkers.models.ranking import (
    RecordRequest,
    RecordResponse,
    RankedAddress,
    TopAddressesResponse,
    AddressCountResponse,
    StatsResponse,
    ResetResponse,
)

logger = logging.getLogger(__name__)

ranking_bp = Blueprint("ranking", __name__, url_prefix="/api/v1/ranking")


def get_listener():
    """Listener injected by the application factory"""
    return current_app.extensions["request_listener"]


def get_scheduler():
    """Epoch scheduler, or None when resets are not scheduled"""
    return current_app.extensions.get("epoch_scheduler")


@ranking_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint"""
    return jsonify({"status": "healthy"}), 200


@ranking_bp.route("", methods=["GET"])
def get_top_addresses():
    """
    Get the top addresses by request count

    Query params:
    - limit: Maximum number of addresses to return (default: all ranked)

    Example:
    GET /api/v1/ranking?limit=10

    Response:
    {
      "epoch": 3,
      "limit": 10,
      "items": [{"address": "145.87.2.109", "count": 1532}, ...]
    }
    """
    try:
        listener = get_listener()

        limit_str = request.args.get("limit")
        try:
            limit = int(limit_str) if limit_str is not None else listener.limit
        except ValueError:
            return jsonify({"error": "limit must be a positive integer"}), 400
        if limit < 1:
            return jsonify({"error": "limit must be a positive integer"}), 400

        epoch, ranked = listener.epoch_ranking()
        ranked = ranked[:limit]

        return (
            jsonify(
                TopAddressesResponse(
                    epoch=epoch,
                    limit=limit,
                    items=[RankedAddress(address=a, count=c) for a, c in ranked],
                ).model_dump(mode="json")
            ),
            200,
        )

    except Exception as e:
        logger.error(f"Error querying ranking: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@ranking_bp.route("/record", methods=["POST"])
def record_address():
    """
    Record a request on behalf of an address

    Request Body:
    {
      "address": "145.87.2.109"
    }

    Response:
    {
      "success": true,
      "address": "145.87.2.109",
      "count": 12,
      "message": "Request recorded"
    }
    """
    try:
        data = request.get_json(silent=True)
        if data is None:
            raise ValueError("Request body must be a JSON object")

        body = RecordRequest.model_validate(data)

        listener = get_listener()
        count = listener.record(body.address)

        return (
            jsonify(
                RecordResponse(
                    success=True,
                    address=body.address,
                    count=count,
                    message="Request recorded",
                ).model_dump(mode="json")
            ),
            201,
        )

    except ValueError as e:
        logger.warning(f"Invalid record request: {e}")
        return (
            jsonify(
                RecordResponse(
                    success=False, message=f"Invalid record request: {str(e)}"
                ).model_dump(mode="json")
            ),
            400,
        )
    except Exception as e:
        logger.error(f"Error recording request: {e}", exc_info=True)
        return (
            jsonify(
                RecordResponse(
                    success=False, message="Internal server error"
                ).model_dump(mode="json")
            ),
            500,
        )


@ranking_bp.route("/reset", methods=["POST"])
def reset_epoch():
    """
    Discard all counts and start a new epoch

    Response:
    {
      "success": true,
      "epoch": 4,
      "message": "Epoch reset"
    }
    """
    try:
        listener = get_listener()
        epoch = listener.reset_epoch()

        return (
            jsonify(
                ResetResponse(success=True, epoch=epoch, message="Epoch reset").model_dump(
                    mode="json"
                )
            ),
            200,
        )

    except Exception as e:
        logger.error(f"Error resetting epoch: {e}", exc_info=True)
        return jsonify({"success": False, "message": "Internal server error"}), 500


@ranking_bp.route("/count/<path:address>", methods=["GET"])
def get_address_count(address: str):
    """
    Get the request count of one address in the current epoch

    Example:
    GET /api/v1/ranking/count/145.87.2.109

    Response:
    {
      "epoch": 3,
      "address": "145.87.2.109",
      "count": 12,
      "ranked": true
    }
    """
    try:
        epoch, count, ranked = get_listener().lookup(address)

        return (
            jsonify(
                AddressCountResponse(
                    epoch=epoch,
                    address=address,
                    count=count,
                    ranked=ranked,
                ).model_dump(mode="json")
            ),
            200,
        )

    except Exception as e:
        logger.error(f"Error querying address count: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@ranking_bp.route("/stats", methods=["GET"])
def get_stats():
    """
    Get listener statistics

    Response:
    {
      "epoch": 3,
      "epoch_started_at": "2025-10-16T00:00:00Z",
      "distinct_addresses": 8412,
      "total_requests": 120931,
      "capacity": 100,
      "ranked": 100,
      "next_reset_in_seconds": 3600.0
    }
    """
    try:
        stats = get_listener().stats()
        scheduler = get_scheduler()
        next_reset = scheduler.seconds_until_reset() if scheduler is not None else -1.0

        return (
            jsonify(
                StatsResponse(
                    epoch=stats.epoch,
                    epoch_started_at=stats.epoch_started_at,
                    distinct_addresses=stats.distinct_addresses,
                    total_requests=stats.total_requests,
                    capacity=stats.capacity,
                    ranked=stats.ranked,
                    next_reset_in_seconds=next_reset,
                ).model_dump(mode="json")
            ),
            200,
        )

    except Exception as e:
        logger.error(f"Error getting stats: {e}", exc_info=True)
        return jsonify({"error": "Failed to get stats"}), 500
