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
vApp operations of the vCloud Director API.

Operations that change a vApp return the ``Task`` sent back by the server;
it is up to the caller to wait for it with ``Task.wait_task_completion``.
Operations on "the VM" act on the first child of the vApp.
"""

import logging
import time

from osm_vcd import metadata, params
from osm_vcd.errors import VcdException, VcdNotFoundException, VcdTimeoutException, VcdValidationError, prefixed
from osm_vcd.network import FENCE_MODE_BRIDGED, ip_allocation_mode, isolated_network_configuration, \
    validate_network_config_settings
from osm_vcd.task import Task
from osm_vcd.types import MIME_DEPLOY_VAPP_PARAMS, MIME_GUEST_CUSTOMIZATION_SECTION, MIME_NETWORK_CONFIG_SECTION, \
    MIME_PRODUCT_SECTIONS, MIME_RASD_ITEM, MIME_RECOMPOSE_VAPP_PARAMS, MIME_UNDEPLOY_VAPP_PARAMS, MIME_VDC, \
    MIME_VM, TEMPLATE_STATUS_READY, VAPP_STATUSES, NetworkConfigSectionType, NetworkConfiguration, \
    NetworkConnection, NetworkConnectionSectionType, Reference, VAppNetworkConfiguration, VAppType, to_xml_string
from osm_vcd.vdc import Vdc

# seconds between two status checks of block_while_status
STATUS_POLL_INTERVAL = 0.2


class VApp(object):
    """Client side copy of a vApp bound to a logged in Client"""

    def __init__(self, client, vapp=None):
        self.client = client
        self.vapp = vapp or VAppType()
        self.logger = logging.getLogger('vcd.vapp')

    @classmethod
    def from_href(cls, client, href):
        vapp = cls(client)
        vapp.vapp.href = href
        vapp.refresh()
        return vapp

    @property
    def href(self):
        return self.vapp.href

    @property
    def name(self):
        return self.vapp.name

    def __repr__(self):
        return "VApp(name={!r}, href={!r})".format(self.vapp.name, self.vapp.href)

    def _task_request(self, method, href, error_message, content_type=None, body=None):
        data = None
        if body is not None:
            data = to_xml_string(body)
        try:
            element = self.client.request(method, href, content_type=content_type, data=data)
            return self.client.task_from_response(element)
        except VcdException as exp:
            raise prefixed(exp, error_message)

    def _refresh_before(self, action):
        try:
            self.refresh()
        except VcdException as exp:
            raise prefixed(exp, "error refreshing vApp before {}".format(action))

    def _first_vm(self):
        if not self.vapp.children:
            raise VcdNotFoundException("vApp {} doesn't contain any children, aborting customization".format(
                self.vapp.name))
        return self.vapp.children[0]

    def refresh(self):
        """Fetch the vApp again, replacing the cached copy"""
        if not self.vapp.href:
            raise VcdException("cannot refresh, Object is empty")
        self.vapp = VAppType.from_xml(self.client.get_resource(self.vapp.href))

    def get_parent_vdc(self):
        for link in self.vapp.links:
            if link.type == MIME_VDC:
                return Vdc.from_href(self.client, link.href)
        raise VcdNotFoundException("could not find a parent Vdc for vApp {}".format(self.vapp.name))

    def add_vm(self, networks, vapp_template, name, accept_all_eulas):
        """Add a VM to the vApp from the first VM of a vApp template.

        Args:
            networks: list of dicts with keys orgnetwork, ip, ip_allocation_mode,
                adapter_type and is_primary. Each network is also assigned
                to the VM with the same inner and container name.
            vapp_template: VAppTemplateType, resolved and powered off.
            name: name of the new VM.
            accept_all_eulas: accept the EULAs of the template.

        Returns:
            The recompose Task.
        """
        if vapp_template is None or not vapp_template.children:
            raise VcdValidationError("vApp Template can not be empty")
        if vapp_template.status != TEMPLATE_STATUS_READY:
            raise VcdValidationError("vApp Template shape is not ok")

        template_vm = vapp_template.children[0]
        template_section = template_vm.network_connection_section or NetworkConnectionSectionType()
        connection_section = NetworkConnectionSectionType(
            href=template_section.href,
            type=template_section.type,
            info="Network config for sourced item",
            primary_network_connection_index=template_section.primary_network_connection_index)

        network_assignments = []
        for index, network in enumerate(networks or []):
            mode, ip_address = ip_allocation_mode(network)
            connection = NetworkConnection(network=network['orgnetwork'],
                                           network_connection_index=index,
                                           ip_address=ip_address,
                                           is_connected=True,
                                           ip_address_allocation_mode=mode)
            if network.get('adapter_type'):
                connection.network_adapter_type = network['adapter_type']
            if network.get('is_primary'):
                connection_section.primary_network_connection_index = index
            connection_section.network_connections.append(connection)
            network_assignments.append((network['orgnetwork'], network['orgnetwork']))

        item = params.sourced_item(template_vm.href, name,
                                   network_connection_section=connection_section,
                                   network_assignments=network_assignments)
        body = params.recompose_vapp_params(name=self.vapp.name,
                                            description=self.vapp.description,
                                            sourced_items=[item],
                                            accept_all_eulas=accept_all_eulas)
        self.logger.debug("Adding VM {} to vApp {} from template {}".format(name, self.vapp.name,
                                                                             vapp_template.name))
        return self._task_request('POST', self.vapp.href + '/action/recomposeVApp',
                                  "error instantiating a new VM",
                                  content_type=MIME_RECOMPOSE_VAPP_PARAMS, body=body)

    def remove_vm(self, vm):
        """Delete a VM of the vApp and wait for the recompose to finish.

        Tasks already running on the vApp are waited for first.

        Args:
            vm: VmType, Reference or href of the VM.
        """
        vm_href = vm if isinstance(vm, str) else vm.href
        self._refresh_before("removing VM")
        for task in self.vapp.tasks:
            try:
                Task(self.client, task).wait_task_completion()
            except VcdException as exp:
                raise prefixed(exp, "error performing task")

        body = params.recompose_vapp_params(delete_item_hrefs=[vm_href])
        task = self._task_request('POST', self.vapp.href + '/action/recomposeVApp',
                                  "error removing VM from vApp",
                                  content_type=MIME_RECOMPOSE_VAPP_PARAMS, body=body)
        try:
            return task.wait_task_completion()
        except VcdException as exp:
            raise prefixed(exp, "error performing task")

    def _power_action(self, action, error_message):
        return self._task_request('POST', '{}/power/action/{}'.format(self.vapp.href, action), error_message)

    def power_on(self):
        try:
            self.block_while_status('UNRESOLVED', self.client.max_retry_timeout)
        except VcdException as exp:
            raise prefixed(exp, "error powering on vApp")
        return self._power_action('powerOn', "error powering on vApp")

    def power_off(self):
        return self._power_action('powerOff', "error powering off vApp")

    def reboot(self):
        return self._power_action('reboot', "error rebooting vApp")

    def reset(self):
        return self._power_action('reset', "error resetting vApp")

    def suspend(self):
        return self._power_action('suspend', "error suspending vApp")

    def shutdown(self):
        return self._power_action('shutdown', "error shutting down vApp")

    def undeploy(self):
        return self._task_request('POST', self.vapp.href + '/action/undeploy', "error undeploy vApp",
                                  content_type=MIME_UNDEPLOY_VAPP_PARAMS,
                                  body=params.undeploy_vapp_params('powerOff'))

    def deploy(self):
        return self._task_request('POST', self.vapp.href + '/action/deploy', "error deploy vApp",
                                  content_type=MIME_DEPLOY_VAPP_PARAMS,
                                  body=params.deploy_vapp_params(power_on=False))

    def delete(self):
        return self._task_request('DELETE', self.vapp.href, "error deleting vApp")

    def run_customization_script(self, computer_name, script):
        return self.customize(computer_name, script, False)

    def customize(self, computer_name, script, change_sid):
        """Set the guest customization of the VM: computer name and script"""
        self._refresh_before("running customization")
        vm = self._first_vm()
        body = params.guest_customization_section(vm.href, computer_name, script, change_sid=change_sid)
        return self._task_request('PUT', vm.href + '/guestCustomizationSection/', "error customizing VM",
                                  content_type=MIME_GUEST_CUSTOMIZATION_SECTION, body=body)

    def get_status(self):
        """Return the status name of the vApp, e.g. 'POWERED_ON'"""
        try:
            self.refresh()
        except VcdException as exp:
            raise prefixed(exp, "error refreshing vApp")
        return VAPP_STATUSES.get(self.vapp.status)

    def block_while_status(self, unwanted_status, timeout_seconds):
        """Wait until the vApp leaves ``unwanted_status``.

        The status is checked every 200 milliseconds.

        Raises:
            VcdTimeoutException: still in unwanted_status after timeout_seconds.
        """
        deadline = time.time() + timeout_seconds
        while True:
            time.sleep(STATUS_POLL_INTERVAL)
            if time.time() >= deadline:
                raise VcdTimeoutException("timed out waiting for vApp to exit state {} after {} seconds".format(
                    unwanted_status, timeout_seconds))
            try:
                current_status = self.get_status()
            except VcdException as exp:
                raise prefixed(exp, "could not get vApp status")
            if current_status != unwanted_status:
                return

    def get_network_connection_section(self):
        vm = self._first_vm()
        if not vm.href:
            raise VcdException("cannot refresh, Object is empty")
        try:
            return NetworkConnectionSectionType.from_xml(
                self.client.get_resource(vm.href + '/networkConnectionSection/'))
        except VcdException as exp:
            raise prefixed(exp, "error retrieving network connection section")

    def change_cpu_count(self, virtual_cpu_count):
        return self.change_cpu_count_with_core(virtual_cpu_count, None)

    def change_cpu_count_with_core(self, virtual_cpu_count, cores_per_socket):
        """Set the number of virtual logical processors of the VM.

        The socket count is virtual_cpu_count / cores_per_socket.
        """
        self._refresh_before("changing CPU count")
        vm = self._first_vm()
        body = params.cpu_item(vm.href, virtual_cpu_count, cores_per_socket)
        return self._task_request('PUT', vm.href + '/virtualHardwareSection/cpu', "error customizing VM",
                                  content_type=MIME_RASD_ITEM, body=body)

    def change_storage_profile(self, name):
        self._refresh_before("changing storage profile")
        vm = self._first_vm()
        try:
            vdc = self.get_parent_vdc()
        except VcdException as exp:
            raise prefixed(exp, "error retrieving parent VDC for vApp {}".format(self.vapp.name))
        try:
            storage_profile = vdc.find_storage_profile_reference(name)
        except VcdException as exp:
            raise prefixed(exp, "error retrieving storage profile {} for vApp {}".format(name, self.vapp.name))
        body = params.vm_params(vm.name, storage_profile=storage_profile)
        return self._task_request('PUT', vm.href, "error customizing VM", content_type=MIME_VM, body=body)

    def change_vm_name(self, name):
        self._refresh_before("renaming VM")
        vm = self._first_vm()
        return self._task_request('PUT', vm.href, "error customizing VM", content_type=MIME_VM,
                                  body=params.vm_params(name))

    def change_memory_size(self, size):
        """Set the memory of the VM, in MB"""
        self._refresh_before("changing memory size")
        vm = self._first_vm()
        body = params.memory_item(vm.href, size)
        return self._task_request('PUT', vm.href + '/virtualHardwareSection/memory', "error customizing VM",
                                  content_type=MIME_RASD_ITEM, body=body)

    def get_metadata(self):
        return metadata.get_metadata(self.client, self.vapp.href)

    def add_metadata(self, key, value):
        return metadata.add_metadata(self.client, key, value, self.vapp.href)

    def delete_metadata(self, key):
        return metadata.delete_metadata(self.client, key, self.vapp.href)

    def set_ovf(self, parameters):
        """Set values of OVF properties of the VM product section.

        Args:
            parameters: dict of property key to value. Keys not already
                present in the product section are ignored.
        """
        self._refresh_before("setting OVF properties")
        vm = self._first_vm()
        product_section = vm.product_section
        if product_section is None:
            raise VcdNotFoundException("vApp doesn't contain any children with ProductSection, "
                                       "aborting customization")
        for key, value in parameters.items():
            prop = product_section.get_property(key)
            if prop is not None:
                prop.value = value
            else:
                self.logger.debug("OVF property {} not found in VM {}, skipped".format(key, vm.name))
        return self._task_request('PUT', vm.href + '/productSections', "error customizing VM Network",
                                  content_type=MIME_PRODUCT_SECTIONS,
                                  body=params.product_section_list(product_section))

    def get_network_config_section(self):
        try:
            return NetworkConfigSectionType.from_xml(
                self.client.get_resource(self.vapp.href + '/networkConfigSection/'))
        except VcdException as exp:
            raise prefixed(exp, "error retrieving network config section")

    def _put_network_config_section(self, section, error_message):
        return self._task_request('PUT', self.vapp.href + '/networkConfigSection/', error_message,
                                  content_type=MIME_NETWORK_CONFIG_SECTION, body=section.to_xml())

    def add_raw_network_config(self):
        """Apply the current network config section of the vApp again"""
        try:
            section = self.get_network_config_section()
        except VcdException as exp:
            raise prefixed(exp, "error getting vApp networks")
        return self._put_network_config_section(section, "error adding vApp Network")

    def append_network_config(self, org_vdc_network):
        """Connect the vApp to an org VDC network in bridged mode.

        Args:
            org_vdc_network: OrgVdcNetworkType or any object with name and href.
        """
        section = self.get_network_config_section()
        section.info = "Configuration parameters for logical networks"
        section.type = MIME_NETWORK_CONFIG_SECTION
        section.network_configs.append(VAppNetworkConfiguration(
            network_name=org_vdc_network.name,
            configuration=NetworkConfiguration(parent_network=Reference(href=org_vdc_network.href),
                                               fence_mode=FENCE_MODE_BRIDGED)))
        return self._put_network_config_section(section, "error adding vApp Network")

    def add_isolated_network(self, network_settings):
        """Create an isolated vApp network.

        Args:
            network_settings: network.VappNetworkSettings of the new network.
        """
        validate_network_config_settings(network_settings)
        network_configs = list(self._network_configs())
        network_configs.append(isolated_network_configuration(network_settings))
        self.logger.debug("Adding isolated network {} to vApp {}".format(network_settings.name, self.vapp.name))
        return self.update_network_configurations(network_configs)

    def remove_isolated_network(self, network_name):
        if not network_name:
            raise VcdValidationError("network name can't be empty")

        network_configs = self._network_configs()
        remaining = [config for config in network_configs if config.network_name != network_name]
        if len(remaining) == len(network_configs):
            raise VcdNotFoundException("network to remove {}, wasn't found".format(network_name))
        return self.update_network_configurations(remaining)

    def _network_configs(self):
        if self.vapp.network_config_section is None:
            return []
        return self.vapp.network_config_section.network_configs

    def update_network_configurations(self, network_configs):
        """Replace the whole network config section of the vApp.

        ``network_configs`` must hold every configuration the vApp keeps:
        new, changed and unchanged ones.
        """
        section = NetworkConfigSectionType(network_configs=network_configs)
        return self._put_network_config_section(section, "error updating vApp Network")
