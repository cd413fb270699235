from werkzeug.routing import IntegerConverter

from library_api.utils.validation import INT64_MAX


class IdConverter(IntegerConverter):
    """`<id:name>` URL segment: a positive integer that fits a primary key. Anything else is a 404."""

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault("min", 1)
        kwargs.setdefault("max", INT64_MAX)
        super().__init__(map, *args, **kwargs)
