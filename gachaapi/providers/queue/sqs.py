import boto3
import json
from pydantic import BaseModel

from gachaapi.config import Settings


class SQSClient:
    def __init__(self, settings: Settings):
        self.sqs = boto3.client(
            'sqs',
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            endpoint_url=settings.SQS_ENDPOINT_URL
        )

    def send_message(self, queue_url: str, message: BaseModel, delay_seconds: int = 0) -> str:
        """메시지 전송 후 MessageId 반환 (SQS DelaySeconds 최대 900)"""
        response = self.sqs.send_message(
            QueueUrl=queue_url,
            MessageBody=json.dumps(message.model_dump()),
            DelaySeconds=max(0, min(delay_seconds, 900)),
            MessageAttributes={
                'event_type': {
                    'DataType': 'String',
                    'StringValue': type(message).__name__,
                }
            },
        )
        return response.get('MessageId', '')
