"""Email headers"""
MESSAGE_ID = "Message-ID"
SUBJECT = "Subject"
FROM = "From"
TO = "To"
