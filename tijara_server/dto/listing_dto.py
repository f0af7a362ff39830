import math
from typing import Optional, List, Dict, Any
from datetime import datetime

from tijara_server.exception import ValidationError
from tijara_server.utils.time_utils import utc_now, to_iso

LISTING_STATUSES = ('DRAFT', 'ACTIVE', 'SOLD', 'RENTED', 'EXPIRED', 'ARCHIVED')
LISTING_ACTIONS = ('SELL', 'RENT')


def _as_list(raw, field: str) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError(f'{field} must be a list')
    return raw


def _clean_attributes(raw) -> List[Dict[str, str]]:
    out = []
    for item in _as_list(raw, 'attributes'):
        if not isinstance(item, dict) or not item.get('name'):
            raise ValidationError('attributes must be a list of {name, value} objects')
        out.append({'name': str(item['name']), 'value': str(item.get('value', ''))})
    return out


def _clean_features(raw) -> List[Dict[str, Any]]:
    out = []
    for item in _as_list(raw, 'features'):
        if not isinstance(item, dict) or not item.get('name'):
            raise ValidationError('features must be a list of {name, value} objects')
        out.append({'name': str(item['name']), 'value': bool(item.get('value', False))})
    return out


def _clean_images(raw) -> List[Dict[str, Any]]:
    images = []
    for index, item in enumerate(_as_list(raw, 'images')):
        if isinstance(item, str) and item.strip():
            images.append({'url': item.strip(), 'order': index})
        elif isinstance(item, dict) and isinstance(item.get('url'), str) and item['url'].strip():
            order = item.get('order', index)
            # bool is an int subclass; "order": true is not a position
            if isinstance(order, bool) or not isinstance(order, int):
                raise ValidationError('image order must be an integer')
            images.append({'url': item['url'].strip(), 'order': order})
        else:
            raise ValidationError('images must be URLs or {url, order} objects')
    return sorted(images, key=lambda i: i['order'])


def _required_str(payload: Dict[str, Any], key: str, errors: List[str], *fallbacks: str) -> Optional[str]:
    value = payload.get(key)
    for fallback in fallbacks:
        if value is None or value == '':
            value = payload.get(fallback)
    if value is not None and not isinstance(value, str):
        errors.append(f'{key} must be a string')
        return None
    value = (value or '').strip()
    if not value:
        errors.append(f'{key} is required')
    return value


def _optional_str(payload: Dict[str, Any], key: str, errors: List[str]) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        errors.append(f'{key} must be a string')
        return None
    return value


def _optional_dict(value, field: str, errors: List[str]) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        errors.append(f'{field} must be an object')
        return None
    return value or None


class ListingDTO:
    def __init__(self, id: str, user_id: str, title: str, price: float, category: str, location: str,
                 description: Optional[str] = None, main_category: Optional[str] = None,
                 sub_category: Optional[str] = None, condition: Optional[str] = None,
                 listing_action: Optional[str] = None, status: str = 'ACTIVE',
                 attributes: Optional[List[Dict[str, Any]]] = None, features: Optional[List[Dict[str, Any]]] = None,
                 images: Optional[List[Dict[str, Any]]] = None, vehicle_details: Optional[Dict[str, Any]] = None,
                 real_estate_details: Optional[Dict[str, Any]] = None, created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None):
        self.id = id
        self.user_id = user_id
        self.title = title
        self.description = description
        self.price = float(price)
        self.category = category
        self.main_category = main_category or category
        self.sub_category = sub_category or category
        self.location = location
        self.condition = condition
        self.listing_action = listing_action
        # Free text in storage; only validated on the way in
        self.status = status
        self.attributes = attributes or []
        self.features = features or []
        self.images = images or []
        self.vehicle_details = vehicle_details
        self.real_estate_details = real_estate_details
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or self.created_at

    @classmethod
    def from_request(cls, listing_id: str, owner_id: str, payload: Dict[str, Any]) -> 'ListingDTO':
        """Build a new listing from a request body, raising ValidationError on bad input."""
        if not isinstance(payload, dict):
            raise ValidationError('Request body must be a JSON object')

        errors = []
        title = _required_str(payload, 'title', errors)
        category = _required_str(payload, 'category', errors, 'mainCategory')
        location = _required_str(payload, 'location', errors)
        description = _optional_str(payload, 'description', errors)
        main_category = _optional_str(payload, 'mainCategory', errors)
        sub_category = _optional_str(payload, 'subCategory', errors)
        condition = _optional_str(payload, 'condition', errors)

        price = payload.get('price')
        if isinstance(price, bool) or not isinstance(price, (int, float, str)):
            errors.append('price must be a number')
        else:
            try:
                price = float(price)
                if not math.isfinite(price):
                    errors.append('price must be a number')
                elif price < 0:
                    errors.append('price must be >= 0')
            except ValueError:
                errors.append('price must be a number')

        listing_action = payload.get('listingAction')
        if listing_action is not None:
            if not isinstance(listing_action, str) or listing_action.upper() not in LISTING_ACTIONS:
                errors.append(f'listingAction must be one of {", ".join(LISTING_ACTIONS)}')
            else:
                listing_action = listing_action.upper()
        status = payload.get('status') or 'ACTIVE'
        if not isinstance(status, str) or status.upper() not in LISTING_STATUSES:
            errors.append(f'status must be one of {", ".join(LISTING_STATUSES)}')
        else:
            status = status.upper()

        details = _optional_dict(payload.get('details'), 'details', errors) or {}
        vehicle_details = _optional_dict(
            details.get('vehicles') or payload.get('vehicleDetails'), 'vehicle details', errors
        )
        real_estate_details = _optional_dict(
            details.get('realEstate') or payload.get('realEstateDetails'), 'real-estate details', errors
        )
        if vehicle_details and real_estate_details:
            errors.append('a listing has either vehicle or real-estate details, not both')

        if errors:
            raise ValidationError('; '.join(errors))

        return cls(
            id=listing_id,
            user_id=owner_id,
            title=title,
            description=description,
            price=price,
            category=category,
            main_category=main_category,
            sub_category=sub_category,
            location=location,
            condition=condition,
            listing_action=listing_action,
            status=status,
            attributes=_clean_attributes(payload.get('attributes')),
            features=_clean_features(payload.get('features')),
            images=_clean_images(payload.get('images')),
            vehicle_details=vehicle_details or None,
            real_estate_details=real_estate_details or None
        )

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'ListingDTO':
        return cls(
            id=str(doc.get('_id')),
            user_id=doc.get('user_id'),
            title=doc.get('title'),
            description=doc.get('description'),
            price=doc.get('price') or 0,
            category=doc.get('category'),
            main_category=doc.get('main_category'),
            sub_category=doc.get('sub_category'),
            location=doc.get('location'),
            condition=doc.get('condition'),
            listing_action=doc.get('listing_action'),
            status=doc.get('status', 'ACTIVE'),
            attributes=doc.get('attributes'),
            features=doc.get('features'),
            images=doc.get('images'),
            vehicle_details=doc.get('vehicle_details'),
            real_estate_details=doc.get('real_estate_details'),
            created_at=doc.get('created_at'),
            updated_at=doc.get('updated_at')
        )

    def to_db_doc(self) -> Dict[str, Any]:
        return {
            '_id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'main_category': self.main_category,
            'sub_category': self.sub_category,
            'location': self.location,
            'condition': self.condition,
            'listing_action': self.listing_action,
            'status': self.status,
            'attributes': self.attributes,
            'features': self.features,
            'images': self.images,
            'vehicle_details': self.vehicle_details,
            'real_estate_details': self.real_estate_details,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'mainCategory': self.main_category,
            'subCategory': self.sub_category,
            'location': self.location,
            'condition': self.condition,
            'listingAction': self.listing_action,
            'status': self.status,
            'attributes': self.attributes,
            'features': self.features,
            'images': self.images,
            'details': {
                'vehicles': self.vehicle_details,
                'realEstate': self.real_estate_details
            },
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at)
        }
