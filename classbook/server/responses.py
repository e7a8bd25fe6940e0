def ok(data=None, message="OK"):
    """Success envelope shared by every endpoint."""
    return {"success": True, "message": message, "data": data}
