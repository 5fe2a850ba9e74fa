from app.models import Alias, EmailLog


def serialize_alias(alias: Alias) -> dict:
    return {
        "id": alias.id,
        "address": alias.address,
        "forward_to": alias.forward_to,
        "notes": alias.notes,
        "created_at": alias.created_at,
        "allow_plus": alias.allow_plus,
    }


def serialize_email_log(email_log: EmailLog) -> dict:
    return {
        "id": email_log.id,
        "ts": email_log.ts,
        "message_id": email_log.message_id,
        "from_addr": email_log.from_addr,
        "to_addr": email_log.to_addr,
        "route": email_log.route,
        "base_addr": email_log.base_addr,
        "dest_addr": email_log.dest_addr,
        "result": email_log.result,
        "size_bytes": email_log.size_bytes,
        "error": email_log.error,
    }
