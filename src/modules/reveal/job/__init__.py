from .retry_publications import start_publication_retry_job

__all__ = ['start_publication_retry_job']
