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

"""
Session and HTTP plumbing for the vCloud Director REST API.
"""

import logging

import requests
from requests.packages.urllib3.exceptions import InsecureRequestWarning

from osm_vcd.errors import VcdException, VcdAuthException, VcdConnectionException, VcdUnexpectedResponse, \
    exception_for_status
from osm_vcd.task import Task
from osm_vcd.types import NSMAP, parse_xml, vcd_tag

requests.packages.urllib3.disable_warnings(InsecureRequestWarning)

API_VERSION = '27.0'
# seconds to wait for a vApp or a task before giving up
MAX_RETRY_TIMEOUT = 60
# seconds between two task refreshes
TASK_POLL_INTERVAL = 3

AUTH_HEADER = 'x-vcloud-authorization'
ACCESS_TOKEN_HEADER = 'X-VMWARE-VCLOUD-ACCESS-TOKEN'


class Client(object):
    """Connection to a vCloud Director organization.

    Args:
        url: vCloud Director endpoint, e.g. https://vcd.example.com
        user: organization user name.
        passwd: password of the user.
        org_name: organization to log in; 'System' for the provider admin.
        api_version: API version sent in every Accept header.
        verify: verify the server certificate.
        max_retry_timeout: seconds to wait for vApps and tasks.
        task_poll_interval: seconds between two task refreshes.
        logger: optional logger, ``vcd.client`` by default.
    """

    def __init__(self, url, user=None, passwd=None, org_name=None, api_version=API_VERSION, verify=False,
                 max_retry_timeout=MAX_RETRY_TIMEOUT, task_poll_interval=TASK_POLL_INTERVAL, logger=None):
        if not url:
            raise VcdException('url param can not be NoneType')
        self.url = url.rstrip('/')
        self.user = user
        self.passwd = passwd
        self.org_name = org_name
        self.api_version = api_version
        self.verify = verify
        self.max_retry_timeout = max_retry_timeout
        self.task_poll_interval = task_poll_interval
        self.logger = logger or logging.getLogger('vcd.client')
        self.session = requests.Session()
        self.token = None
        self.access_token = None
        self.org_href = None

    def __repr__(self):
        return "Client(url={!r}, user={!r}, org={!r})".format(self.url, self.user, self.org_name)

    def login(self):
        """Open a session and keep its authorization token.

        Returns:
            The session element returned by vCloud Director.
        """
        self.logger.debug("Logging in to a vcd {} as {} to org {}".format(self.url, self.user, self.org_name))
        headers = {'Accept': 'application/*+xml;version={}'.format(self.api_version)}
        response = self.perform_request(req_type='POST',
                                        url='{}/api/sessions'.format(self.url),
                                        headers=headers,
                                        auth=('{}@{}'.format(self.user, self.org_name), self.passwd))
        if response.status_code != requests.codes.ok:
            self.logger.debug("Login failed with status code {}".format(response.status_code))
            raise VcdAuthException("Can't connect to a vCloud director org: {} as user: {}".format(
                self.org_name, self.user), http_code=response.status_code)

        self.token = response.headers.get(AUTH_HEADER)
        self.access_token = response.headers.get(ACCESS_TOKEN_HEADER)
        if not self.token and not self.access_token:
            raise VcdAuthException("vCloud director login response has no authorization token")

        session = parse_xml(response.content)
        for link in session.iterfind('vcloud:Link', NSMAP):
            if link.get('type') == 'application/vnd.vmware.vcloud.org+xml':
                self.org_href = link.get('href')
                break
        self.logger.info("Successfully logged to a vcloud direct org: {} as user: {}".format(self.org_name,
                                                                                              self.user))
        return session

    def logout(self):
        if not self.is_logged_in():
            return
        try:
            self.request('DELETE', '{}/api/session'.format(self.url))
        finally:
            self.token = None
            self.access_token = None

    def is_logged_in(self):
        return bool(self.token or self.access_token)

    def get_headers(self, content_type=None):
        headers = {'Accept': 'application/*+xml;version={}'.format(self.api_version)}
        if self.access_token:
            headers['Authorization'] = 'Bearer {}'.format(self.access_token)
        elif self.token:
            headers[AUTH_HEADER] = self.token
        if content_type:
            headers['Content-Type'] = content_type
        return headers

    def perform_request(self, req_type, url, headers=None, data=None, auth=None):
        """Perform the POST/PUT/GET/DELETE request.

        Raises:
            VcdConnectionException: the endpoint cannot be reached.
        """
        self.logger.debug("{} {}".format(req_type, url))
        try:
            response = self.session.request(req_type, url, headers=headers, data=data, auth=auth,
                                            verify=self.verify)
        except requests.exceptions.RequestException as exp:
            raise VcdConnectionException("Failed {} request to {}: {}".format(req_type, url, exp))
        self.logger.debug("{} {} returned {}".format(req_type, url, response.status_code))
        return response

    def check_response(self, response):
        """Return the response if it is a success, otherwise raise the vCD error.

        The error element (message, majorErrorCode, minorErrorCode) is
        decoded when the body contains one.
        """
        if 200 <= response.status_code < 300:
            return response

        message = "API call returned status code {}".format(response.status_code)
        major_error_code = minor_error_code = None
        if response.content:
            try:
                error = parse_xml(response.content)
            except VcdUnexpectedResponse:
                error = None
            if error is not None and error.tag == vcd_tag('Error'):
                message = "API Error: {}: {}".format(error.get('majorErrorCode'), error.get('message'))
                major_error_code = error.get('majorErrorCode')
                minor_error_code = error.get('minorErrorCode')

        exp = exception_for_status(response.status_code)(message, http_code=response.status_code)
        exp.major_error_code = major_error_code
        exp.minor_error_code = minor_error_code
        raise exp

    def request(self, method, href, content_type=None, data=None):
        """Perform an authenticated request and decode the XML body.

        Returns:
            lxml element of the response body or None if the body is empty.
        """
        if data is not None:
            self.logger.debug("Request body: {}".format(data))
        response = self.check_response(self.perform_request(req_type=method,
                                                            url=href,
                                                            headers=self.get_headers(content_type),
                                                            data=data))
        if not response.content:
            return None
        return parse_xml(response.content)

    def get_resource(self, href):
        element = self.request('GET', href)
        if element is None:
            raise VcdUnexpectedResponse("Empty response for GET {}".format(href))
        return element

    def query_records(self, record_type, qfilter=None):
        """Run a query of the query service.

        Args:
            record_type: query type, e.g. 'vApp', 'vm', 'orgVdcNetwork'.
            qfilter: optional filter expression, e.g. 'name==myvapp'.

        Returns:
            list of dicts with the attributes of each record.
        """
        url = '{}/api/query?type={}&format=records&pageSize=128'.format(self.url, record_type)
        if qfilter:
            # operators stay readable, values such as '&' or '#' are escaped
            url += '&filter={}'.format(requests.utils.quote(qfilter, safe='=*;,()'))
        records = []
        while url:
            result = self.get_resource(url)
            records.extend(dict(record.attrib) for record in result
                           if record.tag != vcd_tag('Link') and record.tag.endswith('Record'))
            url = None
            for link in result.iterfind('vcloud:Link', NSMAP):
                if link.get('rel') == 'nextPage':
                    url = link.get('href')
                    break
        return records

    def task_from_response(self, element):
        return Task.from_xml(self, element)
