import ulid


def new_id(prefix: str = "") -> str:
    """
    Genera un ID string ordenable usando ULID.
    `prefix` marca el tipo de entidad ("stage-", "task-", "wf_").
    """
    return prefix + str(ulid.new())
