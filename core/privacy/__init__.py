"""
Privacy-preserving disclosure control.

Every view of a candidate or company that crosses roles runs through
``core.privacy.pipeline``: relationship lookup, policy decision (with the
subscription gate inside it), projection and, for privileged contact views,
a transactional audit write.
"""
