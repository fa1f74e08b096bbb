from app.tasks.celery_app import celery
from app.tasks import worker_jobs

@celery.task(name="app.tasks.jobs.expire_payment_intents")
def expire_payment_intents():
    return worker_jobs.expire_payment_intents()
