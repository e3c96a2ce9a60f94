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
Metadata of any vCloud Director entity, addressed by the entity href.
"""

from osm_vcd import params
from osm_vcd.errors import VcdException, prefixed
from osm_vcd.types import MIME_METADATA_VALUE, MetadataType, to_xml_string


def get_metadata(client, href):
    try:
        return MetadataType.from_xml(client.get_resource(href + '/metadata/'))
    except VcdException as exp:
        raise prefixed(exp, "error retrieving metadata")


def add_metadata(client, key, value, href):
    """Set the string metadata ``key`` of the entity, returns the Task"""
    body = to_xml_string(params.metadata_value(value))
    try:
        element = client.request('PUT', '{}/metadata/{}'.format(href, key),
                                 content_type=MIME_METADATA_VALUE, data=body)
        return client.task_from_response(element)
    except VcdException as exp:
        raise prefixed(exp, "error adding metadata")


def delete_metadata(client, key, href):
    try:
        element = client.request('DELETE', '{}/metadata/{}'.format(href, key))
        return client.task_from_response(element)
    except VcdException as exp:
        raise prefixed(exp, "error deleting metadata")
