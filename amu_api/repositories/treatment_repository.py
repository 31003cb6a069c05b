"""
DynamoDB Repository for treatment entries.
Handles CRUD operations for treatment records in DynamoDB.
"""
from datetime import datetime
from typing import List, Optional, Tuple
import json
import base64
import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from amu_api.core import config
from amu_api.core.exceptions import DynamoDBException, ValidationException
from amu_api.models.treatment_entry import TreatmentEntry, VetApproval

OPTIONAL_FIELDS = (
    'farm_name',
    'state',
    'district',
    'animal_type',
    'dosage',
    'frequency',
    'duration',
    'reason',
    'vet_notes'
)


class TreatmentRepository:
    """Repository for treatment entry DynamoDB operations."""

    def __init__(self):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table = self.dynamodb.Table(config.settings.treatments_table_name)

    def save(self, entry: TreatmentEntry) -> None:
        """
        Save a treatment entry to DynamoDB.

        Args:
            entry: TreatmentEntry domain model

        Raises:
            DynamoDBException: If save operation fails
        """
        try:
            self.table.put_item(Item=self._entry_to_item(entry))
        except ClientError as e:
            raise DynamoDBException(f"Failed to save treatment entry: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error saving treatment entry: {str(e)}") from e

    def get_by_id(self, entry_id: str) -> Optional[TreatmentEntry]:
        """
        Retrieve a treatment entry by ID.

        Returns:
            TreatmentEntry or None if not found

        Raises:
            DynamoDBException: If query fails
        """
        try:
            response = self.table.get_item(Key={'entry_id': entry_id})

            if 'Item' not in response:
                return None

            return self._item_to_entry(response['Item'])

        except ClientError as e:
            raise DynamoDBException(f"Failed to get treatment entry: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error getting treatment entry: {str(e)}") from e

    def find_all_paginated(
        self,
        limit: int = 10,
        next_token: Optional[str] = None,
        vet_approval: Optional[VetApproval] = None
    ) -> Tuple[List[TreatmentEntry], Optional[str]]:
        """
        Retrieve treatment entries with pagination.

        Args:
            limit: Maximum number of items to evaluate per page
            next_token: Base64-encoded pagination token from previous request
            vet_approval: Only return entries in this review state

        Returns:
            Tuple of (list of TreatmentEntry objects, next_token or None)

        Raises:
            DynamoDBException: If scan fails
            ValidationException: If next_token is invalid
        """
        try:
            scan_kwargs = {'Limit': limit}

            if vet_approval is not None:
                scan_kwargs['FilterExpression'] = Attr('vet_approval').eq(VetApproval(vet_approval).value)

            if next_token:
                try:
                    scan_kwargs['ExclusiveStartKey'] = json.loads(base64.b64decode(next_token))
                except Exception:
                    raise ValidationException("Invalid pagination token")

            response = self.table.scan(**scan_kwargs)
            entries = [self._item_to_entry(item) for item in response.get('Items', [])]

            next_token = None
            if 'LastEvaluatedKey' in response:
                next_token = base64.b64encode(
                    json.dumps(response['LastEvaluatedKey']).encode()
                ).decode()

            return entries, next_token

        except ValidationException:
            raise
        except ClientError as e:
            raise DynamoDBException(f"Failed to scan treatment entries: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error scanning treatment entries: {str(e)}") from e

    def find_all(self) -> List[TreatmentEntry]:
        """
        Retrieve every treatment entry, following scan pages.

        Raises:
            DynamoDBException: If scan fails
        """
        try:
            items = []
            scan_kwargs = {}
            while True:
                response = self.table.scan(**scan_kwargs)
                items.extend(response.get('Items', []))
                if 'LastEvaluatedKey' not in response:
                    break
                scan_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

            return [self._item_to_entry(item) for item in items]

        except ClientError as e:
            raise DynamoDBException(f"Failed to scan treatment entries: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error scanning treatment entries: {str(e)}") from e

    def update_review(self, entry_id: str, vet_approval: VetApproval, vet_notes: Optional[str], reviewed_at: datetime) -> None:
        """
        Record a veterinarian's review decision.

        Raises:
            DynamoDBException: If update operation fails
        """
        updates = {
            'vet_approval': VetApproval(vet_approval).value,
            'reviewed_at': reviewed_at.isoformat()
        }
        if vet_notes:
            updates['vet_notes'] = vet_notes

        try:
            update_expression = "SET "
            expression_values = {}
            expression_names = {}

            for key, value in updates.items():
                update_expression += f"#{key} = :{key}, "
                expression_values[f":{key}"] = value
                expression_names[f"#{key}"] = key

            update_expression = update_expression.rstrip(", ")

            self.table.update_item(
                Key={'entry_id': entry_id},
                UpdateExpression=update_expression,
                ExpressionAttributeNames=expression_names,
                ExpressionAttributeValues=expression_values
            )

        except ClientError as e:
            raise DynamoDBException(f"Failed to update treatment review: {str(e)}") from e
        except Exception as e:
            raise DynamoDBException(f"Unexpected error updating treatment review: {str(e)}") from e

    def _entry_to_item(self, entry: TreatmentEntry) -> dict:
        """Convert TreatmentEntry domain model to DynamoDB item."""
        item = {
            'entry_id': entry.entry_id,
            'farmer_name': entry.farmer_name,
            'animal_id': entry.animal_id,
            'medicine': entry.medicine,
            'treatment_date': entry.treatment_date,
            'vet_approval': entry.vet_approval.value,
            'created_at': entry.created_at.isoformat()
        }

        for field in OPTIONAL_FIELDS:
            value = getattr(entry, field)
            if value:
                item[field] = value

        if entry.reviewed_at:
            item['reviewed_at'] = entry.reviewed_at.isoformat()

        return item

    def _item_to_entry(self, item: dict) -> TreatmentEntry:
        """Convert DynamoDB item to TreatmentEntry domain model."""
        reviewed_at = item.get('reviewed_at')
        return TreatmentEntry(
            entry_id=item['entry_id'],
            farmer_name=item['farmer_name'],
            animal_id=item['animal_id'],
            medicine=item['medicine'],
            treatment_date=item['treatment_date'],
            vet_approval=VetApproval(item.get('vet_approval', VetApproval.PENDING.value)),
            created_at=datetime.fromisoformat(item['created_at']),
            reviewed_at=datetime.fromisoformat(reviewed_at) if reviewed_at else None,
            **{field: item.get(field) for field in OPTIONAL_FIELDS}
        )
