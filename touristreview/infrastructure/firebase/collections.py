"""Firestore collection and field names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. These names are shared with the mobile
client that wrote the existing data, so they must stay byte-for-byte the
same (including the capitalised place collections).
"""

COLLECTION_USERS = "users"
COLLECTION_LOCATIONS = "Locations"
SUBCOLLECTION_RATINGS = "Ratings"

# users/{uid}
USER_NAME = "name"
USER_EMAIL = "email"
USER_ID = "userid"
USER_FRIENDS = "friends"
USER_FRIEND_REQ_SENT = "friendReqSent"
USER_FRIEND_REQ_REC = "friendReqRec"
USER_RATED = "rated"
USER_BIO = "bio"
USER_PROFILE_PIC = "profilePic"
USER_PROFILE_PERMISSIONS = "profilePermissions"

# Locations/{id}
LOCATION_PLACE_MARK = "placeMark"
LOCATION_DESCRIPTION = "description"
LOCATION_PLACE_ID = "placeId"

# Locations/{id}/Ratings/{id}
RATING_STARS = "rating"
RATING_DESCRIPTION = "ratingDescription"
RATING_USER_ID = "userid"
RATING_USER_NAME = "userName"
RATING_TIMESTAMP = "timestamp"
RATING_PLACE_MARK = "placeMark"
