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

import logging

from osm_vcd.errors import VcdException, VcdNotFoundException
from osm_vcd.types import MIME_VAPP, VdcType, VAppTemplateType, Reference


class Vdc(object):
    """Organization virtual datacenter owning vApps and storage profiles"""

    def __init__(self, client, vdc=None):
        self.client = client
        self.vdc = vdc or VdcType()
        self.logger = logging.getLogger('vcd.vdc')

    @classmethod
    def from_href(cls, client, href):
        return cls(client, VdcType.from_xml(client.get_resource(href)))

    @property
    def href(self):
        return self.vdc.href

    @property
    def name(self):
        return self.vdc.name

    def refresh(self):
        """Fetch the VDC again, replacing the cached copy"""
        if not self.vdc.href:
            raise VcdException("cannot refresh, Object is empty")
        self.vdc = VdcType.from_xml(self.client.get_resource(self.vdc.href))

    def find_storage_profile_reference(self, name):
        """Return the Reference of the storage profile called ``name``

        Raises:
            VcdNotFoundException: no storage profile has that name.
        """
        for profile in self.vdc.storage_profiles:
            if profile.name == name:
                return Reference(href=profile.href, name=profile.name, type=profile.type, id=profile.id)
        raise VcdNotFoundException("can't find any storage profile in VDC {} with name {}".format(
            self.vdc.name, name))

    def find_vapp_by_name(self, name):
        """Return the Reference of the vApp called ``name``, None if it does not exist"""
        for entity in self.vdc.resource_entities:
            if entity.type == MIME_VAPP and entity.name == name:
                self.logger.debug("Found vApp {} at {}".format(name, entity.href))
                return entity
        return None

    def get_vapp_template(self, href):
        return VAppTemplateType.from_xml(self.client.get_resource(href))
