from marshmallow import Schema, fields, validate, pre_load, EXCLUDE


class CreateFoodLogSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    food_name = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    quantity = fields.Float(required=True, allow_nan=False)
    unit = fields.Str(load_default="g", validate=validate.Length(max=32))
    user_id = fields.Raw(allow_none=True, load_default=None)

    @pre_load
    def strip_strings(self, data, **kwargs):
        cleaned = dict(data)
        for key in ("food_name", "unit"):
            if isinstance(cleaned.get(key), str):
                cleaned[key] = cleaned[key].strip()
        if cleaned.get("unit") in ("", None):
            cleaned.pop("unit", None)
        return cleaned


class ParseFoodTextSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    text = fields.Str(required=True, validate=validate.Length(min=1, max=2000))
    user_id = fields.Raw(allow_none=True, load_default=None)


class UserQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    user_id = fields.Str(allow_none=True, load_default=None)

    @pre_load
    def strip_user_id(self, data, **kwargs):
        cleaned = dict(data)
        if isinstance(cleaned.get("user_id"), str):
            cleaned["user_id"] = cleaned["user_id"].strip() or None
        return cleaned


class ListFoodLogQuerySchema(UserQuerySchema):
    date = fields.Date(allow_none=True, load_default=None)
    limit = fields.Int(load_default=None, allow_none=True, validate=validate.Range(min=1))


class DailySummaryQuerySchema(UserQuerySchema):
    date = fields.Date(allow_none=True, load_default=None)
