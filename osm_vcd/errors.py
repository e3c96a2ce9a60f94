# -*- coding: utf-8 -*-

##
# Copyright 2019 VMware Inc.
# This file is part of ETSI OSM
# All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.
#
# For those usages not covered by the Apache License, Version 2.0 please
# contact:  osslegalrouting@vmware.com
##

"""Exceptions raised by the vCloud Director client.

Every exception carries an ``http_code`` so callers exposing this client
through a REST interface can translate them directly.
"""

Bad_Request = 400
Unauthorized = 401
Forbidden = 403
Not_Found = 404
Request_Timeout = 408
Conflict = 409
Internal_Server_Error = 500
Service_Unavailable = 503


class VcdException(Exception):
    """Base Exception for all vCloud Director client errors

    This class accepts an extra argument ``http_code`` (integer
    representing HTTP error codes).
    """

    def __init__(self, message, http_code=Internal_Server_Error):
        Exception.__init__(self, message)
        self.http_code = http_code
        self.major_error_code = None
        self.minor_error_code = None


class VcdConnectionException(VcdException):
    """Connectivity error with the vCloud Director endpoint"""

    def __init__(self, message, http_code=Service_Unavailable):
        VcdException.__init__(self, message, http_code)


class VcdAuthException(VcdException):
    """Invalid credentials or not enough privileges"""

    def __init__(self, message, http_code=Unauthorized):
        VcdException.__init__(self, message, http_code)


class VcdNotFoundException(VcdException):
    """The item is not found at vCloud Director"""

    def __init__(self, message, http_code=Not_Found):
        VcdException.__init__(self, message, http_code)


class VcdConflictException(VcdException):
    """There is a conflict, e.g. the entity is busy"""

    def __init__(self, message, http_code=Conflict):
        VcdException.__init__(self, message, http_code)


class VcdUnexpectedResponse(VcdException):
    """Got a wrong response from vCloud Director"""

    def __init__(self, message, http_code=Internal_Server_Error):
        VcdException.__init__(self, message, http_code)


class VcdValidationError(VcdException):
    """The given parameters are invalid"""

    def __init__(self, message, http_code=Bad_Request):
        VcdException.__init__(self, message, http_code)


class VcdTimeoutException(VcdException):
    """Timed out waiting for a resource to change state"""

    def __init__(self, message, http_code=Request_Timeout):
        VcdException.__init__(self, message, http_code)


class VcdTaskError(VcdException):
    """A task finished with error, canceled or aborted status"""

    def __init__(self, message, http_code=Internal_Server_Error, task=None):
        VcdException.__init__(self, message, http_code)
        self.task = task


class VcdConfigException(VcdException):
    """Invalid configuration file or environment"""

    def __init__(self, message, http_code=Bad_Request):
        VcdException.__init__(self, message, http_code)


_exceptions_by_code = {
    Bad_Request: VcdValidationError,
    Unauthorized: VcdAuthException,
    Forbidden: VcdAuthException,
    Not_Found: VcdNotFoundException,
    Request_Timeout: VcdTimeoutException,
    Conflict: VcdConflictException,
    Service_Unavailable: VcdConnectionException,
}


def exception_for_status(http_code):
    """Return the exception class that represents an HTTP error status"""
    return _exceptions_by_code.get(http_code, VcdUnexpectedResponse)


def prefixed(exc, prefix):
    """Build a copy of ``exc`` with ``prefix`` prepended to its message.

    The copy keeps class, http_code and the vCloud error codes, so callers
    can still tell a missing resource from a busy one.
    """
    kwargs = {"http_code": exc.http_code}
    if isinstance(exc, VcdTaskError):
        kwargs["task"] = exc.task
    new_exc = exc.__class__("{}: {}".format(prefix, exc), **kwargs)
    new_exc.major_error_code = exc.major_error_code
    new_exc.minor_error_code = exc.minor_error_code
    return new_exc
