from . import user_dto as _user_dto
from . import listing_dto as _listing_dto

UserDTO = _user_dto.UserDTO
ListingDTO = _listing_dto.ListingDTO
