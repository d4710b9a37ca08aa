# Pydantic request/response models, grouped by API area
