from app.services.common import pagination_meta


def envelope(data) -> dict:
    return {"success": True, "data": data}


class ListResponseMixin:
    """Wraps a service's ``list``/``count`` pair in the paginated envelope.

    Subclasses implement ``list(db, *filters, order_by, order_dir, page, limit)``
    and ``count(db, *filters)`` with the same positional filter arguments.
    """

    @classmethod
    def list_response(
        cls,
        db,
        *filters,
        order_by: str,
        order_dir: str,
        page: int,
        limit: int,
    ) -> dict:
        items = cls.list(
            db,
            *filters,
            order_by=order_by,
            order_dir=order_dir,
            page=page,
            limit=limit,
        )
        total = cls.count(db, *filters)
        return {
            "success": True,
            "data": items,
            "pagination": pagination_meta(total, page, limit),
        }
