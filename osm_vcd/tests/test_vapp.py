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

import unittest

import mock

from osm_vcd.client import Client
from osm_vcd.errors import VcdException, VcdNotFoundException, VcdTimeoutException, VcdValidationError
from osm_vcd.network import DhcpSettings, VappNetworkSettings
from osm_vcd.tests import test_vcd_xml_response as xml_resp
from osm_vcd.types import NSMAP, IPRange, OrgVdcNetworkType, VAppTemplateType, VAppType, parse_xml
from osm_vcd.vapp import VApp

VAPP_HREF = 'https://localhost/api/vApp/vapp-4f6a9b49-e92d-4935-87a1-0e4dc9c3a069'
VM_HREF = 'https://localhost/api/vApp/vm-47d12505-5968-4e16-95a7-18743edb0c8b'
TASK_HREF = 'https://localhost/api/task/a7fc3be1-63c4-4cfa-bc8c-c3d1b5b61b39'


def response(content, status_code=200):
    return mock.Mock(status_code=status_code, content=content, headers={})


def task_response():
    return response(xml_resp.task_running_xml_response, status_code=202)


def status_response(status):
    return response(xml_resp.vapp_status_xml_response.format(status))


class TestVApp(unittest.TestCase):
    def setUp(self):
        self.client = Client('https://localhost', user='admin', passwd='secret', org_name='Org3')
        self.client.token = 'abc123'
        self.vapp = VApp(self.client, VAppType.from_xml(parse_xml(xml_resp.vapp_xml_response)))

    def sent(self, perform_request, index=-1):
        """Return method, url, content type and decoded body of a request"""
        kwargs = perform_request.call_args_list[index][1]
        body = parse_xml(kwargs['data']) if kwargs.get('data') else None
        return kwargs['req_type'], kwargs['url'], kwargs['headers'].get('Content-Type'), body

    @mock.patch.object(Client, 'perform_request')
    def test_refresh(self, perform_request):
        """
        Testcase to refresh a vApp replacing the cached copy
        """
        perform_request.return_value = response(xml_resp.vapp_xml_response)
        self.vapp.refresh()
        self.vapp.refresh()

        self.assertEqual(len(self.vapp.vapp.children), 1)
        self.assertEqual(len(self.vapp.vapp.network_config_section.network_configs), 3)
        self.assertEqual(self.sent(perform_request)[:2], ('GET', VAPP_HREF))

    def test_refresh_empty(self):
        self.assertRaises(VcdException, VApp(self.client).refresh)

    @mock.patch.object(Client, 'perform_request')
    def test_from_href(self, perform_request):
        perform_request.return_value = response(xml_resp.vapp_xml_response)
        vapp = VApp.from_href(self.client, VAPP_HREF)
        self.assertEqual(vapp.name, 'Test1_vm-69a18104-8413-4cb8-bad7-b5afaec6f9fa')
        self.assertEqual(vapp.vapp.description, 'Vapp instance')
        self.assertFalse(vapp.vapp.deployed)

    @mock.patch.object(Client, 'perform_request')
    def test_get_parent_vdc(self, perform_request):
        perform_request.return_value = response(xml_resp.vdc_xml_response)
        vdc = self.vapp.get_parent_vdc()
        self.assertEqual(vdc.name, 'Org3-VDC-PVDC1')
        self.assertEqual(self.sent(perform_request)[1],
                         'https://localhost/api/vdc/2584137f-6541-4c04-a2a2-e56bfca14c69')

    def test_get_parent_vdc_missing_link(self):
        self.vapp.vapp.links = []
        self.assertRaises(VcdNotFoundException, self.vapp.get_parent_vdc)

    @mock.patch('osm_vcd.vapp.time')
    @mock.patch.object(Client, 'perform_request')
    def test_power_on(self, perform_request, time_mock):
        """
        Testcase to power on a vApp once it is resolved
        """
        time_mock.time.return_value = 0
        perform_request.side_effect = [status_response(0), status_response(0), status_response(8), task_response()]

        task = self.vapp.power_on()

        self.assertEqual(task.status, 'running')
        self.assertEqual(task.href, TASK_HREF)
        self.assertEqual(time_mock.sleep.call_args_list, [mock.call(0.2)] * 3)
        self.assertEqual(self.sent(perform_request)[:2], ('POST', VAPP_HREF + '/power/action/powerOn'))

    @mock.patch('osm_vcd.vapp.time')
    @mock.patch.object(Client, 'perform_request')
    def test_power_on_unresolved_timeout(self, perform_request, time_mock):
        time_mock.time.side_effect = [0, 30, 60]
        perform_request.return_value = status_response(0)

        with self.assertRaises(VcdTimeoutException) as context:
            self.vapp.power_on()

        self.assertIn('error powering on vApp', str(context.exception))
        self.assertIn('exit state UNRESOLVED after 60 seconds', str(context.exception))
        self.assertEqual(perform_request.call_count, 1)

    @mock.patch('osm_vcd.vapp.time')
    @mock.patch.object(Client, 'perform_request')
    def test_block_while_status(self, perform_request, time_mock):
        time_mock.time.return_value = 0
        perform_request.side_effect = [status_response(4), status_response(4), status_response(8)]

        self.vapp.block_while_status('POWERED_ON', 10)

        self.assertEqual(perform_request.call_count, 3)
        self.assertEqual(self.vapp.vapp.status, 8)

    @mock.patch('osm_vcd.vapp.time')
    @mock.patch.object(Client, 'perform_request')
    def test_block_while_status_timeout(self, perform_request, time_mock):
        """
        Testcase to time out while the vApp keeps the unwanted status
        """
        time_mock.time.side_effect = [0, 0.5, 1.0]
        perform_request.return_value = status_response(0)

        with self.assertRaises(VcdTimeoutException) as context:
            self.vapp.block_while_status('UNRESOLVED', 1)

        self.assertEqual(str(context.exception),
                         'timed out waiting for vApp to exit state UNRESOLVED after 1 seconds')
        self.assertEqual(perform_request.call_count, 1)

    @mock.patch('osm_vcd.vapp.time')
    @mock.patch.object(Client, 'perform_request')
    def test_block_while_status_error(self, perform_request, time_mock):
        time_mock.time.return_value = 0
        perform_request.return_value = response(xml_resp.not_found_xml_response, status_code=404)

        with self.assertRaises(VcdNotFoundException) as context:
            self.vapp.block_while_status('UNRESOLVED', 10)

        self.assertTrue(str(context.exception).startswith('could not get vApp status: error refreshing vApp'))

    @mock.patch.object(Client, 'perform_request')
    def test_power_actions(self, perform_request):
        """
        Testcase to send the power actions of a vApp
        """
        perform_request.return_value = task_response()
        for method, action in (('power_off', 'powerOff'), ('reboot', 'reboot'), ('reset', 'reset'),
                               ('suspend', 'suspend'), ('shutdown', 'shutdown')):
            with self.subTest(method=method):
                task = getattr(self.vapp, method)()
                self.assertEqual(task.status, 'running')
                req_type, url, content_type, body = self.sent(perform_request)
                self.assertEqual(req_type, 'POST')
                self.assertEqual(url, '{}/power/action/{}'.format(VAPP_HREF, action))
                self.assertIsNone(body)

    @mock.patch.object(Client, 'perform_request')
    def test_power_off_busy(self, perform_request):
        perform_request.return_value = response(xml_resp.busy_xml_response, status_code=400)

        with self.assertRaises(VcdValidationError) as context:
            self.vapp.power_off()

        self.assertTrue(str(context.exception).startswith('error powering off vApp: API Error: 400: '))
        self.assertEqual(context.exception.http_code, 400)
        self.assertEqual(context.exception.minor_error_code, 'BAD_REQUEST')

    @mock.patch.object(Client, 'perform_request')
    def test_undeploy(self, perform_request):
        perform_request.return_value = task_response()
        self.vapp.undeploy()

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('POST', VAPP_HREF + '/action/undeploy'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.undeployVAppParams+xml')
        self.assertEqual(body.findtext('vcloud:UndeployPowerAction', namespaces=NSMAP), 'powerOff')

    @mock.patch.object(Client, 'perform_request')
    def test_deploy(self, perform_request):
        perform_request.return_value = task_response()
        self.vapp.deploy()

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('POST', VAPP_HREF + '/action/deploy'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.deployVAppParams+xml')
        self.assertEqual(body.get('powerOn'), 'false')

    @mock.patch.object(Client, 'perform_request')
    def test_delete(self, perform_request):
        perform_request.return_value = task_response()
        self.vapp.delete()
        self.assertEqual(self.sent(perform_request)[:2], ('DELETE', VAPP_HREF))

    @mock.patch.object(Client, 'perform_request')
    def test_customize(self, perform_request):
        """
        Testcase to set the guest customization of the first VM
        """
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]

        self.vapp.customize('vnf-1', '#!/bin/sh\necho hello', True)

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VM_HREF + '/guestCustomizationSection/'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.guestCustomizationSection+xml')
        self.assertEqual(body.get('href'), VM_HREF)
        self.assertEqual(body.findtext('vcloud:ComputerName', namespaces=NSMAP), 'vnf-1')
        self.assertEqual(body.findtext('vcloud:CustomizationScript', namespaces=NSMAP), '#!/bin/sh\necho hello')
        self.assertEqual(body.findtext('vcloud:Enabled', namespaces=NSMAP), 'true')
        self.assertEqual(body.findtext('vcloud:ChangeSid', namespaces=NSMAP), 'true')

    @mock.patch.object(Client, 'perform_request')
    def test_run_customization_script(self, perform_request):
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]
        self.vapp.run_customization_script('vnf-1', 'echo hello')
        body = self.sent(perform_request)[3]
        self.assertEqual(body.findtext('vcloud:ChangeSid', namespaces=NSMAP), 'false')

    @mock.patch.object(Client, 'perform_request')
    def test_customize_no_children(self, perform_request):
        perform_request.return_value = status_response(8)
        self.assertRaises(VcdNotFoundException, self.vapp.customize, 'vnf-1', 'echo hello', False)
        self.assertEqual(perform_request.call_count, 1)

    @mock.patch.object(Client, 'perform_request')
    def test_get_status(self, perform_request):
        perform_request.return_value = status_response(4)
        self.assertEqual(self.vapp.get_status(), 'POWERED_ON')
        perform_request.return_value = status_response(-1)
        self.assertEqual(self.vapp.get_status(), 'FAILED_CREATION')

    @mock.patch.object(Client, 'perform_request')
    def test_get_network_connection_section(self, perform_request):
        perform_request.return_value = response(xml_resp.network_connection_section_xml_response)

        section = self.vapp.get_network_connection_section()

        self.assertEqual(self.sent(perform_request)[:2], ('GET', VM_HREF + '/networkConnectionSection/'))
        self.assertEqual(section.primary_network_connection_index, 1)
        self.assertEqual(len(section.network_connections), 2)
        connection = section.network_connections[1]
        self.assertEqual(connection.network, 'isolated-net')
        self.assertEqual(connection.ip_address, '192.168.2.10')
        self.assertFalse(connection.is_connected)
        self.assertEqual(connection.ip_address_allocation_mode, 'MANUAL')
        self.assertEqual(connection.network_adapter_type, 'E1000')

    @mock.patch.object(Client, 'perform_request')
    def test_change_cpu_count_with_core(self, perform_request):
        """
        Testcase to change the CPU count and cores per socket of the first VM
        """
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]

        self.vapp.change_cpu_count_with_core(4, 2)

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VM_HREF + '/virtualHardwareSection/cpu'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.rasdItem+xml')
        self.assertEqual(body.tag, '{%s}Item' % NSMAP['vcloud'])
        self.assertEqual(body.get('{%s}href' % NSMAP['vcloud']), VM_HREF + '/virtualHardwareSection/cpu')
        self.assertEqual(body.findtext('rasd:VirtualQuantity', namespaces=NSMAP), '4')
        self.assertEqual(body.findtext('rasd:InstanceID', namespaces=NSMAP), '4')
        self.assertEqual(body.findtext('rasd:ResourceType', namespaces=NSMAP), '3')
        self.assertEqual(body.findtext('rasd:AllocationUnits', namespaces=NSMAP), 'hertz * 10^6')
        self.assertEqual(body.findtext('vmw:CoresPerSocket', namespaces=NSMAP), '2')

    @mock.patch.object(Client, 'perform_request')
    def test_change_cpu_count(self, perform_request):
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]
        self.vapp.change_cpu_count(2)
        body = self.sent(perform_request)[3]
        self.assertEqual(body.findtext('rasd:VirtualQuantity', namespaces=NSMAP), '2')
        self.assertIsNone(body.find('vmw:CoresPerSocket', namespaces=NSMAP))

    @mock.patch.object(Client, 'perform_request')
    def test_change_memory_size(self, perform_request):
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]

        self.vapp.change_memory_size(2048)

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VM_HREF + '/virtualHardwareSection/memory'))
        self.assertEqual(body.findtext('rasd:VirtualQuantity', namespaces=NSMAP), '2048')
        self.assertEqual(body.findtext('rasd:InstanceID', namespaces=NSMAP), '5')
        self.assertEqual(body.findtext('rasd:ResourceType', namespaces=NSMAP), '4')
        self.assertEqual(body.findtext('rasd:AllocationUnits', namespaces=NSMAP), 'byte * 2^20')

    @mock.patch.object(Client, 'perform_request')
    def test_change_storage_profile(self, perform_request):
        """
        Testcase to move the first VM to a storage profile of the parent VDC
        """
        perform_request.side_effect = [response(xml_resp.vapp_xml_response),
                                       response(xml_resp.vdc_xml_response),
                                       task_response()]

        self.vapp.change_storage_profile('gold')

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VM_HREF))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.vm+xml')
        self.assertEqual(body.get('name'), 'Ubuntu-vm')
        profile = body.find('vcloud:StorageProfile', NSMAP)
        self.assertEqual(profile.get('href'),
                         'https://localhost/api/vdcStorageProfile/1a2b3c4d-5e6f-4a1b-8c2d-3e4f5a6b7c8d')
        self.assertEqual(profile.get('name'), 'gold')

    @mock.patch.object(Client, 'perform_request')
    def test_change_storage_profile_not_found(self, perform_request):
        perform_request.side_effect = [response(xml_resp.vapp_xml_response),
                                       response(xml_resp.vdc_xml_response)]

        with self.assertRaises(VcdNotFoundException) as context:
            self.vapp.change_storage_profile('silver')

        self.assertIn('error retrieving storage profile silver', str(context.exception))

    @mock.patch.object(Client, 'perform_request')
    def test_change_vm_name(self, perform_request):
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]

        self.vapp.change_vm_name('vnf-vm-1')

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VM_HREF))
        self.assertEqual(body.get('name'), 'vnf-vm-1')
        self.assertIsNone(body.find('vcloud:StorageProfile', NSMAP))

    @mock.patch.object(Client, 'perform_request')
    def test_set_ovf(self, perform_request):
        """
        Testcase to update only the OVF properties present in the product section
        """
        perform_request.side_effect = [response(xml_resp.vapp_xml_response), task_response()]

        self.vapp.set_ovf({'hostname': 'vnf-1', 'dns': '8.8.8.8', 'unknown': 'value'})

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VM_HREF + '/productSections'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.productSections+xml')
        properties = body.findall('ovf:ProductSection/ovf:Property', NSMAP)
        values = {}
        for prop in properties:
            value = prop.findall('ovf:Value', NSMAP)
            self.assertEqual(len(value), 1)
            values[prop.get('{%s}key' % NSMAP['ovf'])] = value[0].get('{%s}value' % NSMAP['ovf'])
        self.assertEqual(values, {'hostname': 'vnf-1', 'dns': '8.8.8.8'})
        self.assertEqual(properties[0].findtext('ovf:Label', namespaces=NSMAP), 'Host name')

    @mock.patch.object(Client, 'perform_request')
    def test_set_ovf_without_product_section(self, perform_request):
        perform_request.return_value = response(xml_resp.vapp_with_tasks_xml_response)
        self.assertRaises(VcdNotFoundException, self.vapp.set_ovf, {'hostname': 'vnf-1'})

    @mock.patch.object(Client, 'perform_request')
    def test_metadata(self, perform_request):
        """
        Testcase to read, set and delete metadata of a vApp
        """
        perform_request.return_value = response(xml_resp.metadata_xml_response)
        metadata = self.vapp.get_metadata()
        self.assertEqual(self.sent(perform_request)[:2], ('GET', VAPP_HREF + '/metadata/'))
        self.assertEqual(metadata.get('vnf_id'), '8d2e1b5f-7bd4-4a8e-9f51-5e3d5c76b8f0')
        self.assertEqual(metadata.as_dict()['image_id'], 'ubuntu-16.04')
        self.assertEqual(metadata.entries[1].domain, 'GENERAL')

        perform_request.return_value = task_response()
        self.vapp.add_metadata('vnf_id', 'abc')
        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VAPP_HREF + '/metadata/vnf_id'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.metadata.value+xml')
        typed_value = body.find('vcloud:TypedValue', NSMAP)
        self.assertEqual(typed_value.get('{%s}type' % NSMAP['xsi']), 'MetadataStringValue')
        self.assertEqual(typed_value.findtext('vcloud:Value', namespaces=NSMAP), 'abc')

        self.vapp.delete_metadata('vnf_id')
        self.assertEqual(self.sent(perform_request)[:2], ('DELETE', VAPP_HREF + '/metadata/vnf_id'))

    @mock.patch.object(Client, 'perform_request')
    def test_metadata_error(self, perform_request):
        perform_request.return_value = response(xml_resp.not_found_xml_response, status_code=404)
        with self.assertRaises(VcdNotFoundException) as context:
            self.vapp.add_metadata('vnf_id', 'abc')
        self.assertTrue(str(context.exception).startswith('error adding metadata'))

    @mock.patch.object(Client, 'perform_request')
    def test_get_network_config_section(self, perform_request):
        perform_request.return_value = response(xml_resp.network_config_section_xml_response)

        section = self.vapp.get_network_config_section()

        self.assertEqual(self.sent(perform_request)[:2], ('GET', VAPP_HREF + '/networkConfigSection/'))
        self.assertEqual(section.network_names(), ['nat-net'])
        configuration = section.network_configs[0].configuration
        self.assertEqual(configuration.fence_mode, 'natRouted')
        self.assertEqual(configuration.parent_network.name, 'external')
        self.assertEqual(configuration.ip_scopes[0].gateway, '192.168.10.1')
        self.assertTrue(section.network_configs[0].is_deployed)

    @mock.patch.object(Client, 'perform_request')
    def test_add_raw_network_config(self, perform_request):
        perform_request.side_effect = [response(xml_resp.network_config_section_xml_response), task_response()]

        self.vapp.add_raw_network_config()

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VAPP_HREF + '/networkConfigSection/'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.networkConfigSection+xml')
        self.assertIsNotNone(body.find('vcloud:NetworkConfig/vcloud:Configuration/vcloud:Features/'
                                       'vcloud:NatService', NSMAP))

    @mock.patch.object(Client, 'perform_request')
    def test_append_network_config(self, perform_request):
        """
        Testcase to bridge an org VDC network keeping the existing configuration
        """
        perform_request.side_effect = [response(xml_resp.network_config_section_xml_response), task_response()]
        org_network = OrgVdcNetworkType(name='external-net',
                                        href='https://localhost/api/admin/network/3d6a0e3c-2b1f-4e58-9c8d')

        self.vapp.append_network_config(org_network)

        body = self.sent(perform_request)[3]
        configs = body.findall('vcloud:NetworkConfig', NSMAP)
        self.assertEqual([config.get('networkName') for config in configs], ['nat-net', 'external-net'])
        self.assertIsNotNone(configs[0].find('vcloud:Configuration/vcloud:Features/vcloud:FirewallService', NSMAP))
        self.assertEqual(configs[1].findtext('vcloud:Configuration/vcloud:FenceMode', namespaces=NSMAP), 'bridged')
        self.assertEqual(configs[1].find('vcloud:Configuration/vcloud:ParentNetwork', NSMAP).get('href'),
                         'https://localhost/api/admin/network/3d6a0e3c-2b1f-4e58-9c8d')
        self.assertEqual(body.findtext('ovf:Info', namespaces=NSMAP),
                         'Configuration parameters for logical networks')

    @mock.patch.object(Client, 'perform_request')
    def test_add_isolated_network(self, perform_request):
        """
        Testcase to create an isolated vApp network with DHCP
        """
        perform_request.return_value = task_response()
        settings = VappNetworkSettings(name='internal', gateway='10.10.0.1', netmask='255.255.255.0',
                                       dns1='10.10.0.2', guest_vlan_allowed=True,
                                       static_ip_ranges=[IPRange('10.10.0.10', '10.10.0.20')],
                                       dhcp_settings=DhcpSettings(is_enabled=True, max_lease_time=7200,
                                                                  default_lease_time=3600,
                                                                  ip_range=IPRange('10.10.0.100')))

        self.vapp.add_isolated_network(settings)

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('PUT', VAPP_HREF + '/networkConfigSection/'))
        configs = body.findall('vcloud:NetworkConfig', NSMAP)
        self.assertEqual([config.get('networkName') for config in configs],
                         ['testing_T6nODiW4-68f68d93-0350-4d86-b40b-6e74dedf994d', 'isolated-net', 'none',
                          'internal'])
        configuration = configs[3].find('vcloud:Configuration', NSMAP)
        self.assertEqual(configuration.findtext('vcloud:FenceMode', namespaces=NSMAP), 'isolated')
        self.assertEqual(configuration.findtext('vcloud:GuestVlanAllowed', namespaces=NSMAP), 'true')
        scope = configuration.find('vcloud:IpScopes/vcloud:IpScope', NSMAP)
        self.assertEqual(scope.findtext('vcloud:Gateway', namespaces=NSMAP), '10.10.0.1')
        self.assertEqual(scope.findtext('vcloud:Dns1', namespaces=NSMAP), '10.10.0.2')
        self.assertEqual(scope.findtext('vcloud:IpRanges/vcloud:IpRange/vcloud:EndAddress', namespaces=NSMAP),
                         '10.10.0.20')
        dhcp = configuration.find('vcloud:Features/vcloud:DhcpService', NSMAP)
        self.assertEqual(dhcp.findtext('vcloud:IsEnabled', namespaces=NSMAP), 'true')
        self.assertEqual(dhcp.findtext('vcloud:MaxLeaseTime', namespaces=NSMAP), '7200')
        self.assertEqual(dhcp.findtext('vcloud:IpRange/vcloud:StartAddress', namespaces=NSMAP), '10.10.0.100')
        self.assertEqual(dhcp.findtext('vcloud:IpRange/vcloud:EndAddress', namespaces=NSMAP), '10.10.0.100')

    @mock.patch.object(Client, 'perform_request')
    def test_add_isolated_network_without_dhcp(self, perform_request):
        perform_request.return_value = task_response()
        settings = VappNetworkSettings(name='internal', gateway='10.10.0.1', netmask='255.255.255.0')

        self.vapp.add_isolated_network(settings)

        body = self.sent(perform_request)[3]
        configuration = body.findall('vcloud:NetworkConfig', NSMAP)[-1].find('vcloud:Configuration', NSMAP)
        self.assertIsNone(configuration.find('vcloud:Features', NSMAP))
        self.assertIsNone(configuration.find('vcloud:IpScopes/vcloud:IpScope/vcloud:IpRanges', NSMAP))

    @mock.patch.object(Client, 'perform_request')
    def test_add_isolated_network_invalid(self, perform_request):
        settings = VappNetworkSettings(name='internal', netmask='255.255.255.0')
        self.assertRaises(VcdValidationError, self.vapp.add_isolated_network, settings)
        perform_request.assert_not_called()

    @mock.patch.object(Client, 'perform_request')
    def test_remove_isolated_network(self, perform_request):
        perform_request.return_value = task_response()

        self.vapp.remove_isolated_network('isolated-net')

        body = self.sent(perform_request)[3]
        self.assertEqual([config.get('networkName') for config in body.findall('vcloud:NetworkConfig', NSMAP)],
                         ['testing_T6nODiW4-68f68d93-0350-4d86-b40b-6e74dedf994d', 'none'])

    @mock.patch.object(Client, 'perform_request')
    def test_remove_isolated_network_not_found(self, perform_request):
        self.assertRaises(VcdNotFoundException, self.vapp.remove_isolated_network, 'missing-net')
        self.assertRaises(VcdValidationError, self.vapp.remove_isolated_network, '')
        perform_request.assert_not_called()

    @mock.patch.object(Client, 'perform_request')
    def test_update_network_configurations(self, perform_request):
        perform_request.return_value = task_response()

        self.vapp.update_network_configurations([])

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual(body.get('type'), 'application/vnd.vmware.vcloud.networkConfigSection+xml')
        self.assertEqual(body.findall('vcloud:NetworkConfig', NSMAP), [])

    @mock.patch.object(Client, 'perform_request')
    def test_update_network_configurations_edited(self, perform_request):
        """
        Testcase to send the edited fields of network configurations decoded from the vApp
        """
        perform_request.return_value = task_response()
        configs = self.vapp.vapp.network_config_section.network_configs
        configs[0].configuration.fence_mode = 'natRouted'
        configs[0].is_deployed = True
        configs[1].description = 'resized pool'
        configs[1].configuration.dhcp_service.max_lease_time = 9000
        configs[1].configuration.ip_scopes[0].gateway = '192.168.2.254'

        self.vapp.update_network_configurations(configs)

        body = self.sent(perform_request)[3]
        sent_configs = body.findall('vcloud:NetworkConfig', NSMAP)
        self.assertEqual(len(sent_configs), 3)
        bridged, isolated = sent_configs[0], sent_configs[1]
        self.assertEqual(bridged.findtext('vcloud:Configuration/vcloud:FenceMode', namespaces=NSMAP), 'natRouted')
        self.assertEqual(bridged.findtext('vcloud:IsDeployed', namespaces=NSMAP), 'true')
        self.assertEqual(bridged.find('vcloud:Link', NSMAP).get('rel'), 'repair')
        self.assertEqual(bridged.findtext('vcloud:Configuration/vcloud:RetainNetInfoAcrossDeployments',
                                          namespaces=NSMAP), 'false')
        self.assertEqual([child.tag.split('}')[1] for child in bridged.find('vcloud:Configuration', NSMAP)],
                         ['IpScopes', 'ParentNetwork', 'FenceMode', 'RetainNetInfoAcrossDeployments'])
        self.assertEqual(isolated.findtext('vcloud:Description', namespaces=NSMAP), 'resized pool')
        self.assertEqual(isolated.findtext('vcloud:Configuration/vcloud:Features/vcloud:DhcpService/'
                                           'vcloud:MaxLeaseTime', namespaces=NSMAP), '9000')
        self.assertEqual(isolated.findtext('vcloud:Configuration/vcloud:IpScopes/vcloud:IpScope/vcloud:Gateway',
                                           namespaces=NSMAP), '192.168.2.254')
        self.assertEqual(len(isolated.findall('vcloud:Configuration/vcloud:Features/vcloud:DhcpService', NSMAP)),
                         1)

    @mock.patch.object(Client, 'perform_request')
    def test_update_network_configurations_keeps_services(self, perform_request):
        """
        Testcase to keep the NAT and firewall services of a network whose gateway changes
        """
        perform_request.side_effect = [response(xml_resp.network_config_section_xml_response), task_response()]
        section = self.vapp.get_network_config_section()
        configuration = section.network_configs[0].configuration
        configuration.ip_scopes[0].gateway = '192.168.10.254'
        configuration.fence_mode = 'isolated'

        self.vapp.update_network_configurations(section.network_configs)

        body = self.sent(perform_request)[3]
        sent = body.find('vcloud:NetworkConfig/vcloud:Configuration', NSMAP)
        self.assertEqual(sent.findtext('vcloud:IpScopes/vcloud:IpScope/vcloud:Gateway', namespaces=NSMAP),
                         '192.168.10.254')
        self.assertEqual(sent.findtext('vcloud:FenceMode', namespaces=NSMAP), 'isolated')
        self.assertEqual([child.tag.split('}')[1] for child in sent.find('vcloud:Features', NSMAP)],
                         ['FirewallService', 'NatService'])
        self.assertEqual(sent.findtext('vcloud:Features/vcloud:NatService/vcloud:NatType', namespaces=NSMAP),
                         'ipTranslation')
        self.assertEqual([child.tag.split('}')[1] for child in sent],
                         ['IpScopes', 'ParentNetwork', 'FenceMode', 'Features'])

    @mock.patch.object(Client, 'perform_request')
    def test_add_vm(self, perform_request):
        """
        Testcase to add a VM from a vApp template with two NICs
        """
        perform_request.return_value = task_response()
        template = VAppTemplateType.from_xml(parse_xml(xml_resp.vapp_template_xml_response.format(8)))
        networks = [{'orgnetwork': 'mgmt-net', 'ip': '10.0.0.5', 'ip_allocation_mode': 'POOL',
                     'adapter_type': 'VMXNET3', 'is_primary': False},
                    {'orgnetwork': 'data-net', 'ip': '', 'ip_allocation_mode': 'POOL',
                     'adapter_type': '', 'is_primary': True}]

        self.vapp.add_vm(networks, template, 'vnf-vm-2', True)

        req_type, url, content_type, body = self.sent(perform_request)
        self.assertEqual((req_type, url), ('POST', VAPP_HREF + '/action/recomposeVApp'))
        self.assertEqual(content_type, 'application/vnd.vmware.vcloud.recomposeVAppParams+xml')
        self.assertEqual(body.get('name'), 'Test1_vm-69a18104-8413-4cb8-bad7-b5afaec6f9fa')
        self.assertEqual(body.get('deploy'), 'false')
        self.assertEqual(body.get('powerOn'), 'false')
        self.assertEqual(body.findtext('vcloud:AllEULAsAccepted', namespaces=NSMAP), 'true')

        item = body.find('vcloud:SourcedItem', NSMAP)
        self.assertEqual(item.find('vcloud:Source', NSMAP).get('href'),
                         'https://localhost/api/vAppTemplate/vm-e1a8f2b5-6c1c-4d3f-8b7e-1a2b3c4d5e6f')
        self.assertEqual(item.findtext('vcloud:VmGeneralParams/vcloud:Name', namespaces=NSMAP), 'vnf-vm-2')
        self.assertEqual(item.findtext('vcloud:VmGeneralParams/vcloud:NeedsCustomization', namespaces=NSMAP),
                         'true')
        section = item.find('vcloud:InstantiationParams/vcloud:NetworkConnectionSection', NSMAP)
        self.assertEqual(section.findtext('ovf:Info', namespaces=NSMAP), 'Network config for sourced item')
        self.assertEqual(section.findtext('vcloud:PrimaryNetworkConnectionIndex', namespaces=NSMAP), '1')
        connections = section.findall('vcloud:NetworkConnection', NSMAP)
        self.assertEqual(connections[0].get('network'), 'mgmt-net')
        self.assertEqual(connections[0].findtext('vcloud:IpAddressAllocationMode', namespaces=NSMAP), 'MANUAL')
        self.assertEqual(connections[0].findtext('vcloud:IpAddress', namespaces=NSMAP), '10.0.0.5')
        self.assertEqual(connections[0].findtext('vcloud:NetworkAdapterType', namespaces=NSMAP), 'VMXNET3')
        self.assertEqual(connections[1].findtext('vcloud:NetworkConnectionIndex', namespaces=NSMAP), '1')
        self.assertEqual(connections[1].findtext('vcloud:IpAddressAllocationMode', namespaces=NSMAP), 'POOL')
        self.assertEqual(connections[1].findtext('vcloud:IpAddress', namespaces=NSMAP), 'Any')
        self.assertIsNone(connections[1].find('vcloud:NetworkAdapterType', NSMAP))
        assignments = item.findall('vcloud:NetworkAssignment', NSMAP)
        self.assertEqual([(a.get('innerNetwork'), a.get('containerNetwork')) for a in assignments],
                         [('mgmt-net', 'mgmt-net'), ('data-net', 'data-net')])
        self.assertEqual(item.findtext('vcloud:VmCapabilities/vcloud:MemoryHotAddEnabled', namespaces=NSMAP),
                         'true')
        self.assertEqual(item.findtext('vcloud:VmCapabilities/vcloud:CpuHotAddEnabled', namespaces=NSMAP), 'true')

    @mock.patch.object(Client, 'perform_request')
    def test_add_vm_invalid_template(self, perform_request):
        template = VAppTemplateType.from_xml(parse_xml(xml_resp.vapp_template_xml_response.format(0)))
        self.assertRaises(VcdValidationError, self.vapp.add_vm, [], template, 'vnf-vm-2', True)
        self.assertRaises(VcdValidationError, self.vapp.add_vm, [], None, 'vnf-vm-2', True)
        self.assertRaises(VcdValidationError, self.vapp.add_vm, [], VAppTemplateType(), 'vnf-vm-2', True)
        perform_request.assert_not_called()

    @mock.patch('osm_vcd.task.time')
    @mock.patch.object(Client, 'perform_request')
    def test_remove_vm(self, perform_request, time_mock):
        """
        Testcase to remove a VM once the running tasks of the vApp finished
        """
        time_mock.time.return_value = 0
        perform_request.side_effect = [response(xml_resp.vapp_with_tasks_xml_response),
                                       response(xml_resp.task_success_xml_response),
                                       task_response(),
                                       response(xml_resp.task_success_xml_response)]

        task = self.vapp.remove_vm(self.vapp.vapp.children[0])

        self.assertEqual(task.status, 'success')
        self.assertEqual(self.sent(perform_request, 1)[:2], ('GET', TASK_HREF))
        req_type, url, content_type, body = self.sent(perform_request, 2)
        self.assertEqual((req_type, url), ('POST', VAPP_HREF + '/action/recomposeVApp'))
        self.assertEqual(body.find('vcloud:DeleteItem', NSMAP).get('href'), VM_HREF)
        self.assertIsNone(body.find('vcloud:SourcedItem', NSMAP))


if __name__ == '__main__':
    unittest.main()
