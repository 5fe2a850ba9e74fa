from app.email_utils import get_email_domain_part


def check_loop(destination: str, worker_domain: str) -> bool:
    """Return True if forwarding to destination would send the email back into worker_domain"""
    return get_email_domain_part(destination) == worker_domain
